"""A bitmap allocator for physical memory frames."""

from __future__ import annotations

from .errors import ErrorCode, KernelError

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB

BYTES_PER_FRAME = 4 * KIB
MAX_PHYSICAL_MEMORY_BYTES = 128 * GIB
FRAME_COUNT = MAX_PHYSICAL_MEMORY_BYTES // BYTES_PER_FRAME
NULL_FRAME = (1 << 64) - 1


class BitmapMemoryManager:
    """Tracks which frames are in use with one bit per frame.

    Allocation searches first-fit within ``[range_begin, range_end)``.
    """

    def __init__(self) -> None:
        self._bitmap = bytearray(FRAME_COUNT // 8)
        self.range_begin = 0
        self.range_end = FRAME_COUNT

    def _check(self, frame: int) -> None:
        if not 0 <= frame < FRAME_COUNT:
            raise IndexError(f"frame {frame} is out of range")

    def is_allocated(self, frame: int) -> bool:
        """Whether ``frame`` is marked as in use."""
        self._check(frame)
        return bool(self._bitmap[frame >> 3] & (1 << (frame & 7)))

    def _set(self, frame: int, allocated: bool) -> None:
        self._check(frame)
        if allocated:
            self._bitmap[frame >> 3] |= 1 << (frame & 7)
        else:
            self._bitmap[frame >> 3] &= ~(1 << (frame & 7)) & 0xFF

    def mark_allocated(self, start_frame: int, num_frames: int) -> None:
        """Mark ``num_frames`` frames from ``start_frame`` as in use."""
        for frame in range(start_frame, start_frame + num_frames):
            self._set(frame, True)

    def set_memory_range(self, range_begin: int, range_end: int) -> None:
        """Restrict allocation to frames in ``[range_begin, range_end)``."""
        self.range_begin = range_begin
        self.range_end = range_end

    def allocate(self, num_frames: int) -> int:
        """Reserve ``num_frames`` contiguous frames and return the first one."""
        start = self.range_begin
        while True:
            for i in range(num_frames):
                if start + i >= self.range_end:
                    raise KernelError(ErrorCode.NO_ENOUGH_MEMORY)
                if self.is_allocated(start + i):
                    break
            else:
                self.mark_allocated(start, num_frames)
                return start
            start += i + 1

    def free(self, start_frame: int, num_frames: int) -> None:
        """Release ``num_frames`` frames from ``start_frame``."""
        for frame in range(start_frame, start_frame + num_frames):
            self._set(frame, False)