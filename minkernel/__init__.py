"""Core pieces of a small hobby kernel: graphics, frame buffers, logging, messages, timers, tasks, keyboard, memory, PCI and paging."""

__version__ = "0.1.0"