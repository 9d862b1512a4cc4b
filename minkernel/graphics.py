"""Geometry, colours and pixel writers for linear frame buffers."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .errors import ErrorCode, KernelError


@dataclass(frozen=True)
class Vector2D:
    """A 2D integer vector or position."""

    x: int
    y: int

    def __add__(self, other: Vector2D) -> Vector2D:
        if not isinstance(other, Vector2D):
            return NotImplemented
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2D) -> Vector2D:
        if not isinstance(other, Vector2D):
            return NotImplemented
        return Vector2D(self.x - other.x, self.y - other.y)


def element_max(lhs: Vector2D, rhs: Vector2D) -> Vector2D:
    """Component-wise maximum of two vectors."""
    return Vector2D(max(lhs.x, rhs.x), max(lhs.y, rhs.y))


def element_min(lhs: Vector2D, rhs: Vector2D) -> Vector2D:
    """Component-wise minimum of two vectors."""
    return Vector2D(min(lhs.x, rhs.x), min(lhs.y, rhs.y))


@dataclass(frozen=True)
class Rectangle:
    """An axis-aligned rectangle given by its top-left corner and size."""

    pos: Vector2D
    size: Vector2D

    def __and__(self, other: Rectangle) -> Rectangle:
        if not isinstance(other, Rectangle):
            return NotImplemented
        lhs_end = self.pos + self.size
        rhs_end = other.pos + other.size
        if (
            lhs_end.x < other.pos.x
            or lhs_end.y < other.pos.y
            or rhs_end.x < self.pos.x
            or rhs_end.y < self.pos.y
        ):
            return Rectangle(Vector2D(0, 0), Vector2D(0, 0))
        new_pos = element_max(self.pos, other.pos)
        new_size = element_min(lhs_end, rhs_end) - new_pos
        return Rectangle(new_pos, new_size)


@dataclass(frozen=True)
class PixelColor:
    """An 8-bit-per-channel RGB colour."""

    r: int
    g: int
    b: int


def to_color(c: int) -> PixelColor:
    """Convert a 0xRRGGBB integer to a colour."""
    return PixelColor((c >> 16) & 0xFF, (c >> 8) & 0xFF, c & 0xFF)


class PixelFormat(enum.IntEnum):
    """Byte layout of a pixel in the frame buffer."""

    RGB_RESV_8BIT_PER_COLOR = 0
    BGR_RESV_8BIT_PER_COLOR = 1


@dataclass
class FrameBufferConfig:
    """Description of a frame buffer; ``frame_buffer`` is None until allocated."""

    frame_buffer: bytearray | None
    pixels_per_scan_line: int
    horizontal_resolution: int
    vertical_resolution: int
    pixel_format: PixelFormat


DESKTOP_BG_COLOR = PixelColor(45, 118, 237)
DESKTOP_FG_COLOR = PixelColor(255, 255, 255)


class PixelWriter(ABC):
    """Something that pixels can be written to."""

    @abstractmethod
    def write(self, pos: Vector2D, color: PixelColor) -> None:
        """Set the pixel at ``pos`` to ``color``."""

    @property
    @abstractmethod
    def width(self) -> int:
        """Width in pixels."""

    @property
    @abstractmethod
    def height(self) -> int:
        """Height in pixels."""


class FrameBufferWriter(PixelWriter):
    """Base for writers that draw into a frame buffer's byte array."""

    BYTES_PER_PIXEL = 4

    def __init__(self, config: FrameBufferConfig) -> None:
        self.config = config

    @property
    def width(self) -> int:
        return self.config.horizontal_resolution

    @property
    def height(self) -> int:
        return self.config.vertical_resolution

    def pixel_offset(self, pos: Vector2D) -> int:
        """Byte offset of the pixel at ``pos`` in the buffer."""
        return self.BYTES_PER_PIXEL * (self.config.pixels_per_scan_line * pos.y + pos.x)

    def _slot(self, pos: Vector2D) -> tuple[bytearray, int]:
        buffer = self.config.frame_buffer
        if buffer is None:
            raise ValueError("frame buffer is not allocated")
        if not (0 <= pos.x < self.width and 0 <= pos.y < self.height):
            raise IndexError(f"pixel {pos} is outside the frame buffer")
        return buffer, self.pixel_offset(pos)


class RGBResv8BitPerColorPixelWriter(FrameBufferWriter):
    """Writes pixels laid out as R, G, B, reserved."""

    def write(self, pos: Vector2D, color: PixelColor) -> None:
        buffer, offset = self._slot(pos)
        buffer[offset:offset + 3] = bytes((color.r, color.g, color.b))


class BGRResv8BitPerColorPixelWriter(FrameBufferWriter):
    """Writes pixels laid out as B, G, R, reserved."""

    def write(self, pos: Vector2D, color: PixelColor) -> None:
        buffer, offset = self._slot(pos)
        buffer[offset:offset + 3] = bytes((color.b, color.g, color.r))


_WRITERS = {
    PixelFormat.RGB_RESV_8BIT_PER_COLOR: RGBResv8BitPerColorPixelWriter,
    PixelFormat.BGR_RESV_8BIT_PER_COLOR: BGRResv8BitPerColorPixelWriter,
}


def make_pixel_writer(config: FrameBufferConfig) -> FrameBufferWriter:
    """Create the writer matching the config's pixel format."""
    try:
        writer_class = _WRITERS[config.pixel_format]
    except KeyError:
        raise KernelError(ErrorCode.UNKNOWN_PIXEL_FORMAT) from None
    return writer_class(config)


def fill_rectangle(writer: PixelWriter, pos: Vector2D, size: Vector2D, color: PixelColor) -> None:
    """Paint every pixel of the rectangle at ``pos`` with ``size``."""
    for dy in range(size.y):
        for dx in range(size.x):
            writer.write(pos + Vector2D(dx, dy), color)


def draw_rectangle(writer: PixelWriter, pos: Vector2D, size: Vector2D, color: PixelColor) -> None:
    """Paint the one-pixel outline of the rectangle at ``pos`` with ``size``."""
    for dx in range(size.x):
        writer.write(pos + Vector2D(dx, 0), color)
        writer.write(pos + Vector2D(dx, size.y - 1), color)
    for dy in range(size.y):
        writer.write(pos + Vector2D(0, dy), color)
        writer.write(pos + Vector2D(size.x - 1, dy), color)


def draw_desktop(writer: PixelWriter) -> None:
    """Draw the desktop background and task bar."""
    width = writer.width
    height = writer.height
    fill_rectangle(writer, Vector2D(0, 0), Vector2D(width, height - 50), DESKTOP_BG_COLOR)
    fill_rectangle(writer, Vector2D(0, height - 50), Vector2D(width, 50), PixelColor(1, 8, 17))
    fill_rectangle(writer, Vector2D(0, height - 50), Vector2D(width // 5, 50), PixelColor(80, 80, 80))
    fill_rectangle(writer, Vector2D(10, height - 40), Vector2D(30, 30), PixelColor(160, 160, 160))