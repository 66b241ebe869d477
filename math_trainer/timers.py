from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field

from .clock import Clock


@dataclass(eq=False, slots=True)
class ScheduledTask:
    """A one-shot callback owned by a :class:`Scheduler`.

    Tasks compare by identity; a cancelled task never fires.
    """

    task_id: int
    name: str
    due_at: float
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        if not self.fired:
            self.cancelled = True


class Scheduler:
    """Cooperative timer queue polled from the render loop.

    Nothing runs on its own: :meth:`update` must be called (once per frame in
    the app, explicitly in tests) and runs every task whose deadline has been
    reached, in deadline order.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._tasks: list[ScheduledTask] = []
        self._ids = itertools.count(1)

    @property
    def clock(self) -> Clock:
        return self._clock

    def call_later(self, delay_s: float, callback: Callable[[], None], *, name: str = "") -> ScheduledTask:
        if delay_s < 0:
            raise ValueError("delay_s must be non-negative")
        task = ScheduledTask(
            task_id=next(self._ids),
            name=name,
            due_at=self._clock.now() + float(delay_s),
            callback=callback,
        )
        self._tasks.append(task)
        return task

    def cancel(self, task: ScheduledTask | None) -> None:
        if task is None:
            return
        task.cancel()
        self._prune()

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()

    def pending(self) -> list[ScheduledTask]:
        return [t for t in self._tasks if t.pending]

    def update(self) -> int:
        """Fire due tasks; returns how many ran."""
        now = self._clock.now()
        due = sorted((t for t in self._tasks if t.pending and t.due_at <= now), key=lambda t: (t.due_at, t.task_id))
        ran = 0
        for task in due:
            # An earlier callback in this batch may have cancelled it.
            if not task.pending:
                continue
            task.fired = True
            task.callback()
            ran += 1
        self._prune()
        return ran

    def _prune(self) -> None:
        self._tasks = [t for t in self._tasks if t.pending]
