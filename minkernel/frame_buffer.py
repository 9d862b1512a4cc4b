"""Frame buffers that can be blitted onto each other."""

from __future__ import annotations

from dataclasses import replace

from .errors import ErrorCode, KernelError
from .graphics import (
    FrameBufferConfig,
    FrameBufferWriter,
    PixelFormat,
    Rectangle,
    Vector2D,
    make_pixel_writer,
)


def bytes_per_pixel(pixel_format: PixelFormat) -> int:
    """Number of bytes one pixel occupies in the given format."""
    if pixel_format in (PixelFormat.RGB_RESV_8BIT_PER_COLOR, PixelFormat.BGR_RESV_8BIT_PER_COLOR):
        return 4
    raise KernelError(ErrorCode.UNKNOWN_PIXEL_FORMAT)


def _frame_offset(pos: Vector2D, config: FrameBufferConfig) -> int:
    return bytes_per_pixel(config.pixel_format) * (config.pixels_per_scan_line * pos.y + pos.x)


def _bytes_per_scan_line(config: FrameBufferConfig) -> int:
    return bytes_per_pixel(config.pixel_format) * config.pixels_per_scan_line


def _copy_bytes(dst: bytearray, dst_off: int, src: bytearray, src_off: int, count: int) -> None:
    if dst_off < 0 or src_off < 0 or dst_off + count > len(dst) or src_off + count > len(src):
        raise IndexError("copy runs outside the frame buffer")
    dst[dst_off:dst_off + count] = src[src_off:src_off + count]


class FrameBuffer:
    """A pixel buffer, either wrapping existing memory or owning its own."""

    def __init__(self, config: FrameBufferConfig) -> None:
        per_pixel = bytes_per_pixel(config.pixel_format)
        self._config = replace(config)
        if self._config.frame_buffer is None:
            self._config.frame_buffer = bytearray(
                per_pixel * self._config.horizontal_resolution * self._config.vertical_resolution
            )
            self._config.pixels_per_scan_line = self._config.horizontal_resolution
        self._writer = make_pixel_writer(self._config)

    @property
    def config(self) -> FrameBufferConfig:
        return self._config

    @property
    def writer(self) -> FrameBufferWriter:
        return self._writer

    @property
    def size(self) -> Vector2D:
        return Vector2D(self._config.horizontal_resolution, self._config.vertical_resolution)

    def copy(self, dst_pos: Vector2D, src: FrameBuffer, src_area: Rectangle) -> None:
        """Copy ``src_area`` of ``src`` to ``dst_pos`` here, clipped to both buffers."""
        if self._config.pixel_format != src._config.pixel_format:
            raise KernelError(ErrorCode.UNKNOWN_PIXEL_FORMAT)
        per_pixel = bytes_per_pixel(self._config.pixel_format)

        src_area_shifted = Rectangle(dst_pos, src_area.size)
        src_outline = Rectangle(dst_pos - src_area.pos, src.size)
        dst_outline = Rectangle(Vector2D(0, 0), self.size)
        copy_area = dst_outline & src_outline & src_area_shifted
        if copy_area.size.x <= 0 or copy_area.size.y <= 0:
            return

        src_start = src_area.pos + (copy_area.pos - dst_pos)
        row_bytes = per_pixel * copy_area.size.x
        dst_off = _frame_offset(copy_area.pos, self._config)
        src_off = _frame_offset(src_start, src._config)
        dst_step = _bytes_per_scan_line(self._config)
        src_step = _bytes_per_scan_line(src._config)
        for _ in range(copy_area.size.y):
            _copy_bytes(self._config.frame_buffer, dst_off, src._config.frame_buffer, src_off, row_bytes)
            dst_off += dst_step
            src_off += src_step

    def move(self, dst_pos: Vector2D, src: Rectangle) -> None:
        """Move the pixels of ``src`` within this buffer so they start at ``dst_pos``."""
        row_bytes = bytes_per_pixel(self._config.pixel_format) * src.size.x
        rows = range(src.size.y)
        if dst_pos.y >= src.pos.y:
            rows = reversed(rows)
        buffer = self._config.frame_buffer
        for dy in rows:
            step = Vector2D(0, dy)
            _copy_bytes(
                buffer,
                _frame_offset(dst_pos + step, self._config),
                buffer,
                _frame_offset(src.pos + step, self._config),
                row_bytes,
            )