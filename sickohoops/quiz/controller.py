"""
QuizController: owns the current quiz.

Loading a topic replaces whatever quiz was being played. Each load gets a
generation number; a resolution that finishes after a newer load started is
thrown away, and the resolver is asked to stop between strategies.
"""

import asyncio
import logging
from typing import Callable, Optional

from sickohoops.config import DEFAULT_TIME_LIMIT
from sickohoops.errors import QuizGenerationError, ResolutionCancelled
from sickohoops.intent.classifier import classify_topic
from sickohoops.quiz.models import QuizPayload
from sickohoops.quiz.session import QuizSession
from sickohoops.sources.resolver import DataSourceResolver

logger = logging.getLogger(__name__)


class QuizController:
    """
    Loads quizzes and keeps only the newest one.

    Example:
        >>> controller = QuizController(build_default_resolver())
        >>> session = await controller.load("Every NBA MVP since 2010")
        >>> session.submit("jokic")
    """

    def __init__(
        self,
        resolver: DataSourceResolver,
        on_complete: Optional[Callable[[int], None]] = None,
    ):
        self.resolver = resolver
        self.on_complete = on_complete
        self.session: Optional[QuizSession] = None
        self.payload: Optional[QuizPayload] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def _discard_session(self):
        if self.session is not None:
            if self.session.is_active:
                self.session.forfeit()
            self.session = None
            self.payload = None

    async def load(
        self,
        topic: str,
        time_limit: int = DEFAULT_TIME_LIMIT,
        max_questions: Optional[int] = None,
        start_timer: bool = False,
    ) -> Optional[QuizSession]:
        """
        Resolve topic and make it the current quiz.

        Returns:
            The new session, or None if a newer load superseded this one.
            Resolver errors (EmptyResultError, SourceUnavailableError)
            propagate to the caller.
        """
        self._generation += 1
        generation = self._generation
        self._discard_session()

        def is_stale() -> bool:
            return generation != self._generation

        intent = classify_topic(topic)
        try:
            payload = await asyncio.to_thread(
                self.resolver.resolve,
                intent,
                topic,
                time_limit=time_limit,
                max_questions=max_questions,
                is_cancelled=is_stale,
            )
        except ResolutionCancelled:
            logger.info(f"Load of '{topic}' cancelled by a newer request")
            return None
        except QuizGenerationError:
            if is_stale():
                logger.info(f"Ignoring failure of superseded load for '{topic}'")
                return None
            raise

        if is_stale():
            logger.info(f"Discarding stale result for '{topic}'")
            return None

        self.payload = payload
        self.session = QuizSession(payload.answers, payload.time_limit, on_complete=self.on_complete)
        if start_timer:
            self.session.start_timer()
        return self.session
