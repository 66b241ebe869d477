from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .config import OperationKind
from .problems import PracticeSession, UserStats

RECENT_SESSION_COUNT = 5


@dataclass(slots=True)
class OperationTally:
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> float:
        """Percent correct; 0.0 when nothing was attempted."""
        return 0.0 if self.total == 0 else self.correct / self.total * 100.0


def operation_breakdown(sessions: Sequence[PracticeSession]) -> dict[OperationKind, OperationTally]:
    """Per-operation correct/total counts, in the fixed operation order.

    Problems whose kind is not one of the four base operations are skipped.
    """
    tallies = {kind: OperationTally() for kind in OperationKind}
    for session in sessions:
        for problem in session.problems:
            tally = tallies.get(problem.kind)
            if tally is None:
                continue
            tally.total += 1
            if problem.is_correct:
                tally.correct += 1
    return tallies


def compute_user_stats(sessions: Sequence[PracticeSession]) -> UserStats | None:
    """Reduce the full history (most-recent-last) into a :class:`UserStats`.

    Returns None for an empty history.  Strongest/weakest pick the first
    operation, in addition -> division order, with the max/min accuracy among
    operations that have at least one problem.
    """
    if not sessions:
        return None

    total_problems = sum(len(s.problems) for s in sessions)
    correct_answers = sum(1 for s in sessions for p in s.problems if p.is_correct)
    total_time = sum(float(s.total_time_s) for s in sessions)
    average_time = None if total_problems == 0 else total_time / total_problems

    tallies = operation_breakdown(sessions)
    accuracy = {kind: t.accuracy for kind, t in tallies.items() if t.total > 0}

    strongest: OperationKind | None = None
    weakest: OperationKind | None = None
    for kind, acc in accuracy.items():
        if strongest is None or acc > accuracy[strongest]:
            strongest = kind
        if weakest is None or acc < accuracy[weakest]:
            weakest = kind

    return UserStats(
        total_problems=total_problems,
        correct_answers=correct_answers,
        average_time_s=average_time,
        operation_accuracy=accuracy,
        strongest_operation=strongest,
        weakest_operation=weakest,
        recent_sessions=tuple(sessions[-RECENT_SESSION_COUNT:]),
        session_count=len(sessions),
    )
