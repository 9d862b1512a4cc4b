# minkernel

The core pieces of a small x86-64 hobby kernel, written as an ordinary
Python library. Every part works on plain Python values and byte buffers,
so it can be driven, inspected and tested without any hardware.

## What is inside

| Module | What it does |
| --- | --- |
| `minkernel.errors` | `ErrorCode` and the `KernelError` exception the other modules raise; `KernelError.name()` gives the code's display name, such as `kFull` |
| `minkernel.graphics` | `Vector2D`, `Rectangle` (with `&` for intersection), `element_max`, `element_min`, `PixelColor`, `to_color`, `PixelFormat`, `FrameBufferConfig`, RGB/BGR pixel writers, `make_pixel_writer`, `fill_rectangle`, `draw_rectangle`, `draw_desktop` |
| `minkernel.frame_buffer` | `FrameBuffer` with clipped `copy` between buffers and overlapping `move` inside one; `bytes_per_pixel` |
| `minkernel.logger` | `LogLevel` and a `Logger` that %-formats messages and passes those at or below its level to a sink |
| `minkernel.message` | `Message`, `MessageType`, `LayerOperation` and the `TimerArg`, `KeyboardArg` and `LayerArg` payloads; `make_layer_message` |
| `minkernel.timer` | `Timer` and a `TimerManager` that counts ticks, sends timeout messages and reports when the task-switch timer expires |
| `minkernel.task` | `Task` and a multi-level round-robin `TaskManager` with per-task message queues |
| `minkernel.keyboard` | `keycode_to_ascii` for USB HID key codes, with shift handling; `make_key_message` |
| `minkernel.memory_manager` | `BitmapMemoryManager`, a first-fit frame allocator over a bitmap |
| `minkernel.pci` | configuration-space addressing, `PciBus` with bus scanning, BAR reads and MSI set-up over a pluggable `ConfigSpace` |
| `minkernel.paging` | `build_identity_page_tables` for a 2 MiB-page identity map |
| `minkernel.rpn` | a tiny reverse Polish calculator |

## Installing

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## A few examples

Rectangles intersect with `&`:

```python
from minkernel.graphics import Rectangle, Vector2D

a = Rectangle(Vector2D(0, 0), Vector2D(10, 10))
b = Rectangle(Vector2D(5, 5), Vector2D(10, 10))
overlap = a & b   # position (5, 5), size (5, 5)
```

Allocating physical frames:

```python
from minkernel.memory_manager import BitmapMemoryManager

manager = BitmapMemoryManager()
manager.set_memory_range(1, 1024)
start = manager.allocate(16)
manager.free(start, 16)
```

When no run of free frames fits, `allocate` raises `KernelError` with
`ErrorCode.NO_ENOUGH_MEMORY`.

Scanning a PCI bus means giving `PciBus` a `ConfigSpace` subclass that
implements `write_address`, `write_data` and `read_data`; `scan_all_bus()`
then returns the `Device` records found.

Evaluating a reverse Polish expression:

```python
from minkernel.rpn import evaluate

evaluate(["3", "4", "+", "2", "-"])   # 5
```

## Command line

The calculator is also installed as a command:

```
minkernel-rpn 3 4 + 2 -
```

Numbers are pushed on a stack; `+` and `-` pop two values and push the
result. The command prints nothing: the value on top of the stack, cut to a
signed 32-bit integer, becomes its exit status.

## What it does not do

This package does not boot or run anything on a machine. It has no way to
read a disk volume or its files, no loader for executable images, and no
firmware table parsing. There is no screen, window system or terminal
either: pixel writers draw into `bytearray` buffers that the caller owns,
and devices are reached only through the objects the caller supplies.