"""
Strategy interface for quiz data acquisition.

A strategy is one self-contained way of getting answers for a topic:
a curated table, the live stats API, a generative provider. Each one
implements attempt(request) and returns a StrategyResult instead of
raising, so the resolver can move on to the next strategy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sickohoops.config import DEFAULT_TIME_LIMIT
from sickohoops.intent.classifier import QueryIntent
from sickohoops.quiz.models import QuizPayload


class FailureReason(str, Enum):
    """Why a strategy did not produce answers."""
    NOT_APPLICABLE = "not_applicable"
    SOURCE_UNAVAILABLE = "source_unavailable"
    EXTRACTION_FAILED = "extraction_failed"
    VALIDATION_FAILED = "validation_failed"
    EMPTY_RESULT = "empty_result"


@dataclass(frozen=True)
class QuizRequest:
    """Everything a strategy needs to attempt a topic."""
    topic: str
    intent: QueryIntent
    time_limit: int = DEFAULT_TIME_LIMIT
    max_questions: Optional[int] = None


@dataclass(frozen=True)
class StrategyFailure:
    """A strategy's reason for deferring to the next one."""
    strategy: str
    reason: FailureReason
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.strategy}: {self.reason.value}" + (f" ({self.detail})" if self.detail else "")


@dataclass(frozen=True)
class StrategyResult:
    """Result from a strategy attempt: a payload or a failure."""
    payload: Optional[QuizPayload] = None
    failure: Optional[StrategyFailure] = None

    @property
    def success(self) -> bool:
        return self.payload is not None and len(self.payload.answers) > 0

    @classmethod
    def ok(cls, payload: QuizPayload) -> "StrategyResult":
        return cls(payload=payload)

    @classmethod
    def failed(cls, strategy: str, reason: FailureReason, detail: str = "") -> "StrategyResult":
        return cls(failure=StrategyFailure(strategy=strategy, reason=reason, detail=detail))


class Strategy:
    """
    Base class for acquisition strategies.

    Subclasses set name and implement attempt(). Failures inside attempt
    are caught there and returned as StrategyResult.failed(...).
    """

    name = "strategy"

    def attempt(self, request: QuizRequest) -> StrategyResult:
        raise NotImplementedError

    def not_applicable(self, detail: str = "") -> StrategyResult:
        return StrategyResult.failed(self.name, FailureReason.NOT_APPLICABLE, detail)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
