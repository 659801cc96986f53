"""
Generative quiz source: one strategy per LLM provider.

The provider is asked for the quiz JSON directly; its text goes through the
StructuredOutputExtractor, then each answer is coerced into an AnswerRecord.
Records that can't be coerced are dropped with a warning. A response with no
usable records counts as a failure so the resolver tries the next provider.
"""

import logging
from typing import Optional

from sickohoops.errors import ProviderError, ValidationFailedError
from sickohoops.extraction.extractor import StructuredOutputExtractor
from sickohoops.llm.prompts import QUIZ_SYSTEM_PROMPT, build_quiz_prompt
from sickohoops.llm.providers import GenerativeProvider
from sickohoops.quiz.models import AnswerRecord, AnswerSet, QuizPayload
from sickohoops.sources.base import FailureReason, QuizRequest, Strategy, StrategyResult

logger = logging.getLogger(__name__)


class GenerativeStrategy(Strategy):
    """
    Generate a quiz with a single provider.

    Example:
        >>> strategy = GenerativeStrategy(OpenAIProvider())
        >>> result = strategy.attempt(request)
        >>> result.payload.answers if result.success else result.failure
    """

    def __init__(
        self,
        provider: GenerativeProvider,
        extractor: Optional[StructuredOutputExtractor] = None,
    ):
        self.provider = provider
        self.extractor = extractor or StructuredOutputExtractor()
        self.name = f"generative_{provider.name}"

    def max_items(self, request: QuizRequest) -> int:
        return request.max_questions or self.provider.default_max_items

    def attempt(self, request: QuizRequest) -> StrategyResult:
        prompt = build_quiz_prompt(
            request.topic,
            time_limit=request.time_limit,
            max_items=self.max_items(request),
        )

        try:
            response = self.provider.complete(prompt, system_prompt=QUIZ_SYSTEM_PROMPT)
        except ProviderError as e:
            logger.warning(f"{self.name} request failed: {e}")
            return StrategyResult.failed(self.name, FailureReason.SOURCE_UNAVAILABLE, str(e))

        logger.debug(f"{self.name} returned {len(response.content)} chars from {response.model}")

        extraction = self.extractor.extract(response.content)
        if not extraction.ok:
            reason = (
                FailureReason.VALIDATION_FAILED
                if extraction.error_code == ValidationFailedError.code
                else FailureReason.EXTRACTION_FAILED
            )
            return StrategyResult.failed(self.name, reason, extraction.error or "")

        if extraction.repairs_applied:
            logger.info(f"{self.name} output needed repairs: {', '.join(extraction.repairs_applied)}")

        data = extraction.payload
        rows = data["answers"]
        if not rows:
            return StrategyResult.failed(self.name, FailureReason.EMPTY_RESULT, "provider returned no answers")

        records = []
        for row in rows:
            try:
                records.append(AnswerRecord.from_dict(row))
            except ValidationFailedError as e:
                logger.warning(f"{self.name}: dropping answer {row!r}: {e.details}")

        if not records:
            return StrategyResult.failed(
                self.name,
                FailureReason.VALIDATION_FAILED,
                f"none of {len(rows)} answers were usable",
            )

        return StrategyResult.ok(QuizPayload(
            title=data["title"] or request.topic,
            description=data["description"],
            answers=AnswerSet.from_records(records),
            time_limit=data.get("timeLimit", request.time_limit),
            source=self.name,
        ))
