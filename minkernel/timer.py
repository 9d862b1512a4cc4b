"""Tick counting and one-shot timers."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Callable

from .message import Message, MessageType, TimerArg

TIMER_FREQ = 1000
TASK_TIMER_PERIOD = int(TIMER_FREQ * 0.02)
TASK_TIMER_VALUE = -(1 << 31)

_NEVER = (1 << 64) - 1


@dataclass(frozen=True)
class Timer:
    """A timer that fires once the tick count reaches ``timeout``."""

    timeout: int
    value: int


class TimerManager:
    """Keeps the tick count and fires timers whose timeout has been reached.

    Fired timers are delivered as timeout messages through ``send``; the
    task-switch timer is re-armed instead and reported by :meth:`tick`.
    """

    def __init__(self, send: Callable[[Message], object]) -> None:
        self._send = send
        self._tick = 0
        self._counter = itertools.count()
        self._timers: list[tuple[int, int, Timer]] = []
        self.add_timer(Timer(_NEVER, -1))

    def add_timer(self, timer: Timer) -> None:
        """Schedule ``timer``."""
        heapq.heappush(self._timers, (timer.timeout, next(self._counter), timer))

    def tick(self) -> bool:
        """Advance one tick; return whether the task-switch timer expired."""
        self._tick += 1
        task_timer_timeout = False
        while True:
            timeout, _, timer = self._timers[0]
            if timeout > self._tick:
                break
            heapq.heappop(self._timers)
            if timer.value == TASK_TIMER_VALUE:
                task_timer_timeout = True
                self.add_timer(Timer(self._tick + TASK_TIMER_PERIOD, TASK_TIMER_VALUE))
                continue
            self._send(Message(MessageType.TIMER_TIMEOUT, arg=TimerArg(timer.timeout, timer.value)))
        return task_timer_timeout

    def current_tick(self) -> int:
        """The number of ticks counted so far."""
        return self._tick