[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minkernel"
version = "0.1.0"
description = "The core of a small hobby kernel in pure Python: pixel writers, frame buffers, PCI, paging, frame allocation, timers and tasks."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kernel",
    "operating-system",
    "frame-buffer",
    "pci",
    "paging",
    "scheduler",
    "memory-manager",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minkernel-rpn = "minkernel.rpn:main"

[tool.hatch.build.targets.wheel]
packages = ["minkernel"]

[tool.pytest.ini_options]
addopts = "-ra"
