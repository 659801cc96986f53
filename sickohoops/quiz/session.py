"""
QuizSession: one play-through of a resolved quiz.

ACTIVE until every answer is found, the timer runs out or the player gives
up; COMPLETE is final. The score is frozen on completion and later guesses
are ignored.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from sickohoops.quiz.matching import MatchingEngine, MatchResult, MatchState
from sickohoops.quiz.models import AnswerSet

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETE = "complete"


class CompletionReason(str, Enum):
    ALL_FOUND = "all_found"
    TIME_EXPIRED = "time_expired"
    FORFEITED = "forfeited"


class QuizSession:
    """
    Timer plus match state for one quiz.

    The timer is an asyncio task started with start_timer(); it calls tick()
    once a second and is cancelled as soon as the session completes.
    tick() can also be driven directly.

    Args:
        answer_set: Answers to find
        time_limit: Seconds on the clock
        on_complete: Called once with the final score
    """

    TICK_INTERVAL = 1.0

    def __init__(
        self,
        answer_set: AnswerSet,
        time_limit: int,
        on_complete: Optional[Callable[[int], None]] = None,
    ):
        self.answer_set = answer_set
        self.engine = MatchingEngine(answer_set)
        self.match_state = MatchState()
        self.time_remaining = max(int(time_limit), 0)
        self.status = SessionStatus.ACTIVE
        self.completion_reason: Optional[CompletionReason] = None
        self.input_text = ""
        self._final_score: Optional[int] = None
        self._on_complete = on_complete
        self._timer: Optional[asyncio.Task] = None

        if self.time_remaining == 0:
            self._complete(CompletionReason.TIME_EXPIRED)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def score(self) -> int:
        if self._final_score is not None:
            return self._final_score
        return len(self.match_state)

    @property
    def total(self) -> int:
        return len(self.answer_set)

    def submit(self, text: str) -> Optional[MatchResult]:
        """Apply a guess. Returns None once the session is complete."""
        if not self.is_active:
            return None

        result = self.engine.match(self.match_state, text)
        self.match_state = result.state
        self.input_text = result.input_text

        if result.matched:
            logger.debug(f"'{text}' matched {len(result.matched)} answers ({self.score}/{self.total})")
        if result.complete:
            self._complete(CompletionReason.ALL_FOUND)
        return result

    def tick(self):
        """Take one second off the clock."""
        if not self.is_active:
            return
        self.time_remaining = max(self.time_remaining - 1, 0)
        if self.time_remaining == 0:
            self._complete(CompletionReason.TIME_EXPIRED)

    def forfeit(self):
        if self.is_active:
            self._complete(CompletionReason.FORFEITED)

    def start_timer(self) -> asyncio.Task:
        """Schedule the countdown on the running event loop."""
        if self._timer is None:
            self._timer = asyncio.get_running_loop().create_task(self._run_timer())
        return self._timer

    async def _run_timer(self):
        while self.is_active:
            await asyncio.sleep(self.TICK_INTERVAL)
            self.tick()

    def found(self) -> list[int]:
        return sorted(self.match_state.indices)

    def _complete(self, reason: CompletionReason):
        self.status = SessionStatus.COMPLETE
        self.completion_reason = reason
        self._final_score = len(self.match_state)

        if self._timer is not None and not self._timer.done():
            # Leave the task alone when the timer itself triggered completion
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if self._timer is not current:
                self._timer.cancel()

        logger.info(f"Quiz complete ({reason.value}): {self._final_score}/{self.total}")
        if self._on_complete is not None:
            self._on_complete(self._final_score)
