"""Mutable per-run state: loop counters and queued inputs."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class QueuedInput:
    """One externally supplied value taken off the queue."""

    name: str
    value: Any


@dataclass
class RunState:
    """State shared by every directive of one run.

    ``enqueue`` may be called from outside the run at any time; everything
    else is only touched by the run itself.
    """

    loops: dict[str, int] = field(default_factory=dict)
    queue: dict[str, deque[Any]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def enqueue(self, name: str, value: Any) -> None:
        with self._lock:
            self.queue.setdefault(name, deque()).append(value)

    def dequeue(self, name: str) -> QueuedInput | None:
        """Take the oldest value queued for ``name``, or ``None`` on a miss."""
        with self._lock:
            pending = self.queue.get(name)
            if not pending:
                return None
            value = pending.popleft()
            if not pending:
                del self.queue[name]
            return QueuedInput(name=name, value=value)

    def pending(self, name: str) -> int:
        with self._lock:
            return len(self.queue.get(name, ()))

    def loop_position(self, loop_id: str) -> int:
        return self.loops.get(loop_id, 0)

    def advance_loop(self, loop_id: str) -> int:
        position = self.loops.get(loop_id, 0) + 1
        self.loops[loop_id] = position
        return position
