"""Tasks with message queues and a multi-level round-robin scheduler."""

from __future__ import annotations

from collections import deque
from typing import Optional, Union

from .errors import ErrorCode, KernelError
from .message import Message

DEFAULT_LEVEL = 1
MAX_LEVEL = 3


class Task:
    """A schedulable task with its own message queue."""

    def __init__(self, task_id: int, manager: TaskManager) -> None:
        self._id = task_id
        self._manager = manager
        self._msgs: deque[Message] = deque()
        self._level = DEFAULT_LEVEL
        self._running = False

    def __repr__(self) -> str:
        return f"Task(id={self._id}, level={self._level}, running={self._running})"

    @property
    def id(self) -> int:
        return self._id

    @property
    def level(self) -> int:
        return self._level

    @property
    def running(self) -> bool:
        return self._running

    def sleep(self) -> Task:
        """Take this task off the run queues."""
        self._manager.sleep(self)
        return self

    def wakeup(self) -> Task:
        """Put this task back on its run queue."""
        self._manager.wakeup(self)
        return self

    def send_message(self, msg: Message) -> None:
        """Queue ``msg`` for this task and wake it up."""
        self._msgs.append(msg)
        self.wakeup()

    def receive_message(self) -> Optional[Message]:
        """Take the oldest queued message, or None if there is none."""
        if not self._msgs:
            return None
        return self._msgs.popleft()


class TaskManager:
    """Schedules tasks round-robin within levels, higher levels first.

    Task 1 is the task that created the manager and runs at the highest
    level; task 2 is the idle task at level 0.
    """

    def __init__(self) -> None:
        self._tasks: list[Task] = []
        self._latest_id = 0
        self._running: list[deque[Task]] = [deque() for _ in range(MAX_LEVEL + 1)]
        self._current_level = MAX_LEVEL
        self._level_changed = False

        main = self.new_task()
        main._level = self._current_level
        main._running = True
        self._running[self._current_level].append(main)

        idle = self.new_task()
        idle._level = 0
        idle._running = True
        self._running[0].append(idle)

    def new_task(self) -> Task:
        """Create a sleeping task with the next free id."""
        self._latest_id += 1
        task = Task(self._latest_id, self)
        self._tasks.append(task)
        return task

    def switch_task(self, current_sleep: bool = False) -> Task:
        """Rotate the current task out and return the task to run next."""
        level_queue = self._running[self._current_level]
        current = level_queue.popleft()
        if not current_sleep:
            level_queue.append(current)
        if not level_queue:
            self._level_changed = True

        if self._level_changed:
            self._level_changed = False
            for level in range(MAX_LEVEL, -1, -1):
                if self._running[level]:
                    self._current_level = level
                    break

        return self._running[self._current_level][0]

    def sleep(self, task: Union[Task, int]) -> None:
        """Stop running ``task`` (a task or its id)."""
        task = self._resolve(task)
        if not task._running:
            return
        task._running = False
        if task is self._running[self._current_level][0]:
            self.switch_task(True)
            return
        self._erase(self._running[task._level], task)

    def wakeup(self, task: Union[Task, int], level: int = -1) -> None:
        """Run ``task`` (a task or its id), at ``level`` if given."""
        task = self._resolve(task)
        if task._running:
            self._change_level_running(task, level)
            return
        if level < 0:
            level = task._level
        task._level = level
        task._running = True
        self._running[level].append(task)
        if level > self._current_level:
            self._level_changed = True

    def send_message(self, task_id: int, msg: Message) -> None:
        """Deliver ``msg`` to the task with ``task_id``."""
        self._resolve(task_id).send_message(msg)

    def current_task(self) -> Task:
        """The task at the head of the current level's queue."""
        return self._running[self._current_level][0]

    def _resolve(self, task: Union[Task, int]) -> Task:
        if isinstance(task, Task):
            return task
        for candidate in self._tasks:
            if candidate.id == task:
                return candidate
        raise KernelError(ErrorCode.NO_SUCH_TASK)

    @staticmethod
    def _erase(queue: deque[Task], task: Task) -> None:
        remaining = [t for t in queue if t is not task]
        queue.clear()
        queue.extend(remaining)

    def _change_level_running(self, task: Task, level: int) -> None:
        if level < 0 or level == task._level:
            return

        if task is not self._running[self._current_level][0]:
            self._erase(self._running[task._level], task)
            self._running[level].append(task)
            if level > self._current_level:
                self._level_changed = True
            return

        self._running[self._current_level].popleft()
        self._running[level].appendleft(task)
        task._level = level
        if level < self._current_level:
            self._level_changed = True
        self._current_level = level