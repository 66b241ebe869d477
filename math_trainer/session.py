"""Practice session state machine.

    IDLE -> ACTIVE -> (SHOWING_RESULT -> ACTIVE)* -> ENDED

The tracker pre-generates the whole problem sequence on :meth:`start`,
freezes each problem's attempt fields on :meth:`submit_answer`, and closes the
session exactly once, handing the record to the history store.

Two timers run on the injected :class:`Scheduler`: the optional session
countdown and the short auto-advance after each answer.  Both are cancelled on
every path into ENDED, so a late callback can never touch a closed session.
Time comes only from the injected ``Clock``; nothing happens between calls to
:meth:`update`.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum

from .clock import Clock
from .generators import generate_practice_problems
from .history import PracticeHistory
from .problems import MathProblem, PracticeSession, PracticeSettings, format_problem, new_problem_id
from .timers import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)

# Fixed pause after each answer, independent of difficulty and time left.
AUTO_ADVANCE_S = 3.0


class SessionPhase(StrEnum):
    IDLE = "idle"
    ACTIVE = "active"
    SHOWING_RESULT = "showing_result"
    ENDED = "ended"


class EndReason(StrEnum):
    COMPLETED = "completed"
    TIME_UP = "time_up"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class AnswerResult:
    problem: MathProblem
    is_correct: bool
    correct_answer: int


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """View model for the UI (pure data)."""

    phase: SessionPhase
    index: int
    total: int
    prompt: str
    score: int
    time_remaining_s: float | None
    problem_elapsed_s: float
    last_result: AnswerResult | None
    end_reason: EndReason | None


def _try_parse_int(text: str) -> int | None:
    s = text.strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PracticeSessionTracker:
    def __init__(
        self,
        *,
        clock: Clock,
        history: PracticeHistory | None = None,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
        wall_clock: Callable[[], datetime] | None = None,
        auto_advance_s: float = AUTO_ADVANCE_S,
    ) -> None:
        if auto_advance_s <= 0:
            raise ValueError("auto_advance_s must be > 0")
        self._clock = clock
        self._history = history
        self._scheduler = scheduler if scheduler is not None else Scheduler(clock)
        self._rng = rng
        self._wall_clock = wall_clock if wall_clock is not None else _utc_now
        self._auto_advance_s = float(auto_advance_s)

        self._phase = SessionPhase.IDLE
        self._session: PracticeSession | None = None
        self._index = 0
        self._started_at: float | None = None
        self._presented_at: float | None = None
        self._last_result: AnswerResult | None = None
        self._end_reason: EndReason | None = None
        self._closed = False

        self._countdown: ScheduledTask | None = None
        self._auto_advance: ScheduledTask | None = None

    # -- Read-only state ---------------------------------------------------
    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def session(self) -> PracticeSession | None:
        return self._session

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def score(self) -> int:
        return 0 if self._session is None else self._session.score

    @property
    def last_result(self) -> AnswerResult | None:
        return self._last_result

    @property
    def end_reason(self) -> EndReason | None:
        return self._end_reason

    @property
    def current_problem(self) -> MathProblem | None:
        if self._phase not in (SessionPhase.ACTIVE, SessionPhase.SHOWING_RESULT):
            return None
        assert self._session is not None
        return self._session.problems[self._index]

    def time_remaining_s(self) -> float | None:
        if self._session is None or self._session.settings.time_limit_s is None:
            return None
        if self._phase not in (SessionPhase.ACTIVE, SessionPhase.SHOWING_RESULT):
            return None
        assert self._started_at is not None
        elapsed = self._clock.now() - self._started_at
        return max(0.0, float(self._session.settings.time_limit_s) - elapsed)

    def problem_elapsed_s(self) -> float:
        if self._phase is not SessionPhase.ACTIVE or self._presented_at is None:
            return 0.0
        return max(0.0, self._clock.now() - self._presented_at)

    def pending_timers(self) -> list[ScheduledTask]:
        return [t for t in (self._countdown, self._auto_advance) if t is not None and t.pending]

    # -- Transitions -------------------------------------------------------
    def start(self, settings: PracticeSettings) -> PracticeSession:
        if self._phase in (SessionPhase.ACTIVE, SessionPhase.SHOWING_RESULT):
            raise RuntimeError("Session already in progress")

        problems = generate_practice_problems(settings, rng=self._rng)
        now = self._clock.now()
        self._session = PracticeSession(
            id=new_problem_id(),
            start_time=self._wall_clock(),
            settings=settings,
            problems=problems,
        )
        self._index = 0
        self._started_at = now
        self._presented_at = now
        self._last_result = None
        self._end_reason = None
        self._closed = False
        self._phase = SessionPhase.ACTIVE

        if settings.time_limit_s is not None:
            self._countdown = self._scheduler.call_later(
                float(settings.time_limit_s), self._on_time_up, name="countdown"
            )
        if not problems:
            self._finish(EndReason.COMPLETED)
        return self._session

    def submit_answer(self, raw: str) -> bool:
        """Record an answer for the current problem.  Returns True if accepted.

        Blank input is refused.  Non-numeric input is accepted and scored as
        incorrect.
        """
        # Let an expired countdown win over a late submission.
        self.update()
        if self._phase is not SessionPhase.ACTIVE:
            return False
        if raw.strip() == "":
            return False

        assert self._session is not None
        assert self._presented_at is not None
        problem = self._session.problems[self._index]
        value = _try_parse_int(raw)
        correct = value is not None and value == problem.answer
        time_spent = max(0.0, self._clock.now() - self._presented_at)

        attempted = problem.attempted(user_answer=value, is_correct=correct, time_spent=time_spent)
        self._session.problems[self._index] = attempted
        if correct:
            self._session.score += 1

        self._last_result = AnswerResult(problem=attempted, is_correct=correct, correct_answer=problem.answer)
        self._phase = SessionPhase.SHOWING_RESULT
        self._auto_advance = self._scheduler.call_later(
            self._auto_advance_s, self._on_auto_advance, name="auto-advance"
        )
        return True

    def advance(self) -> bool:
        if self._phase is not SessionPhase.SHOWING_RESULT:
            return False
        assert self._session is not None
        self._scheduler.cancel(self._auto_advance)
        self._auto_advance = None

        self._index += 1
        if self._index >= len(self._session.problems):
            self._finish(EndReason.COMPLETED)
            return True

        self._presented_at = self._clock.now()
        self._last_result = None
        self._phase = SessionPhase.ACTIVE
        return True

    def end_session(self) -> bool:
        """Abort early; unreached problems stay unattempted in the record."""
        if self._phase not in (SessionPhase.ACTIVE, SessionPhase.SHOWING_RESULT):
            return False
        self._finish(EndReason.ABORTED)
        return True

    def update(self) -> None:
        self._scheduler.update()

    def snapshot(self) -> SessionSnapshot:
        problem = self.current_problem
        total = 0 if self._session is None else len(self._session.problems)
        return SessionSnapshot(
            phase=self._phase,
            index=self._index,
            total=total,
            prompt="" if problem is None else format_problem(problem),
            score=self.score,
            time_remaining_s=self.time_remaining_s(),
            problem_elapsed_s=self.problem_elapsed_s(),
            last_result=self._last_result,
            end_reason=self._end_reason,
        )

    # -- Internals ---------------------------------------------------------
    def _on_time_up(self) -> None:
        self._countdown = None
        self._finish(EndReason.TIME_UP)

    def _on_auto_advance(self) -> None:
        self._auto_advance = None
        self.advance()

    def _finish(self, reason: EndReason) -> None:
        if self._closed:
            return
        self._closed = True
        self._scheduler.cancel(self._countdown)
        self._scheduler.cancel(self._auto_advance)
        self._countdown = None
        self._auto_advance = None

        assert self._session is not None
        assert self._started_at is not None
        self._phase = SessionPhase.ENDED
        self._end_reason = reason
        self._session.end_time = self._wall_clock()
        self._session.total_time_s = max(0.0, self._clock.now() - self._started_at)

        logger.info(
            "session %s ended (%s): %d/%d correct",
            self._session.id,
            reason,
            self._session.score,
            len(self._session.problems),
        )
        if self._history is not None:
            self._history.append(self._session)
