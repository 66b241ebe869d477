from __future__ import annotations

import pytest

from math_trainer.clock import FakeClock
from math_trainer.timers import Scheduler


def test_tasks_fire_once_in_deadline_order() -> None:
    clock = FakeClock()
    sched = Scheduler(clock)
    fired: list[str] = []
    sched.call_later(2.0, lambda: fired.append("b"), name="b")
    sched.call_later(1.0, lambda: fired.append("a"), name="a")
    sched.call_later(5.0, lambda: fired.append("c"), name="c")

    clock.advance(0.5)
    assert sched.update() == 0
    clock.advance(2.0)
    assert sched.update() == 2
    assert fired == ["a", "b"]
    assert [t.name for t in sched.pending()] == ["c"]

    clock.advance(10.0)
    sched.update()
    sched.update()
    assert fired == ["a", "b", "c"]
    assert sched.pending() == []


def test_cancelled_task_never_fires() -> None:
    clock = FakeClock()
    sched = Scheduler(clock)
    fired: list[int] = []
    task = sched.call_later(1.0, lambda: fired.append(1))
    sched.cancel(task)
    sched.cancel(None)
    clock.advance(5.0)
    assert sched.update() == 0
    assert fired == []
    assert task.cancelled and not task.pending


def test_callback_can_cancel_a_later_task_in_the_same_batch() -> None:
    clock = FakeClock()
    sched = Scheduler(clock)
    fired: list[str] = []
    second = sched.call_later(2.0, lambda: fired.append("second"))

    def first() -> None:
        fired.append("first")
        sched.cancel(second)

    sched.call_later(1.0, first)
    clock.advance(3.0)
    assert sched.update() == 1
    assert fired == ["first"]


def test_cancel_all_and_negative_delay() -> None:
    clock = FakeClock()
    sched = Scheduler(clock)
    sched.call_later(1.0, lambda: None)
    sched.call_later(2.0, lambda: None)
    sched.cancel_all()
    assert sched.pending() == []
    with pytest.raises(ValueError):
        sched.call_later(-0.1, lambda: None)
    with pytest.raises(ValueError):
        clock.advance(-1.0)
