"""
DataSourceResolver: runs acquisition strategies in order until one succeeds.

Default chain:
1. Curated tables (three-pointers in a game, triple-double seasons,
   multi-season blocks leaders)
2. Live stats.nba.com league leaders (points only)
3. One generative strategy per configured provider

Strategies run strictly one after another. Only when every strategy has
failed does the resolver raise, and the error carries every failure.
"""

import logging
from typing import Callable, Optional

from sickohoops.config import DEFAULT_TIME_LIMIT
from sickohoops.errors import EmptyResultError, ResolutionCancelled, SourceUnavailableError
from sickohoops.intent.classifier import QueryIntent, classify_topic
from sickohoops.llm import build_providers
from sickohoops.llm.providers import GenerativeProvider
from sickohoops.quiz.models import QuizPayload
from sickohoops.sources.base import FailureReason, QuizRequest, Strategy, StrategyFailure
from sickohoops.sources.curated import curated_strategies
from sickohoops.sources.generative import GenerativeStrategy
from sickohoops.sources.stats_api import LiveStatsStrategy

logger = logging.getLogger(__name__)


class DataSourceResolver:
    """
    Ordered chain of strategies behind a single resolve() call.

    Example:
        >>> resolver = build_default_resolver()
        >>> payload = resolver.resolve_topic("Every NBA MVP since 2010")
        >>> len(payload.answers)
    """

    def __init__(self, strategies: list[Strategy]):
        self.strategies = list(strategies)

    def resolve(
        self,
        intent: QueryIntent,
        topic: str,
        *,
        time_limit: int = DEFAULT_TIME_LIMIT,
        max_questions: Optional[int] = None,
        is_cancelled: Optional[Callable[[], bool]] = None,
    ) -> QuizPayload:
        """
        Try each strategy in order and return the first non-empty payload.

        Args:
            intent: Classified topic
            topic: Original topic text (prompts and curated patterns use it)
            time_limit: Quiz time limit in seconds
            max_questions: Cap passed to generative providers
            is_cancelled: Polled before each strategy; True aborts resolution

        Raises:
            ResolutionCancelled: if is_cancelled() returned True
            EmptyResultError: if a strategy completed but found no answers
                and no later strategy succeeded
            SourceUnavailableError: if every strategy failed otherwise
        """
        request = QuizRequest(
            topic=topic,
            intent=intent,
            time_limit=time_limit,
            max_questions=max_questions,
        )
        failures: list[StrategyFailure] = []

        for strategy in self.strategies:
            if is_cancelled is not None and is_cancelled():
                logger.info(f"Resolution of '{topic}' cancelled before {strategy.name}")
                raise ResolutionCancelled(topic)

            logger.info(f"Trying strategy {strategy.name}")
            try:
                result = strategy.attempt(request)
            except Exception as e:
                logger.exception(f"Strategy {strategy.name} raised unexpectedly")
                failures.append(StrategyFailure(strategy.name, FailureReason.SOURCE_UNAVAILABLE, str(e)))
                continue

            if result.success:
                logger.info(f"Strategy {strategy.name} produced {len(result.payload.answers)} answers")
                return result.payload

            failure = result.failure or StrategyFailure(
                strategy.name, FailureReason.EMPTY_RESULT, "no answers"
            )
            if failure.reason != FailureReason.NOT_APPLICABLE:
                logger.warning(f"Strategy failed: {failure}")
            else:
                logger.debug(f"Strategy skipped: {failure}")
            failures.append(failure)

        details = "; ".join(str(f) for f in failures if f.reason != FailureReason.NOT_APPLICABLE)
        if any(f.reason == FailureReason.EMPTY_RESULT for f in failures):
            raise EmptyResultError(details or None, failures=failures)
        raise SourceUnavailableError(details or None, failures=failures)

    def resolve_topic(self, topic: str, **kwargs) -> QuizPayload:
        """Classify topic, then resolve it."""
        return self.resolve(classify_topic(topic), topic, **kwargs)


def build_default_resolver(
    providers: Optional[list[GenerativeProvider]] = None,
    show_progress: bool = False,
) -> DataSourceResolver:
    """
    Build the standard chain: curated, live stats, then generative providers.

    Args:
        providers: Generative providers in fallback order (default: from config)
        show_progress: Show a tqdm bar while fetching live seasons
    """
    if providers is None:
        providers = build_providers()

    strategies: list[Strategy] = [*curated_strategies(), LiveStatsStrategy(show_progress=show_progress)]
    strategies.extend(GenerativeStrategy(provider) for provider in providers)

    logger.info(f"Resolver chain: {[s.name for s in strategies]}")
    return DataSourceResolver(strategies)


if __name__ == "__main__":
    import argparse
    import json

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Resolve an NBA quiz topic to answers")
    parser.add_argument("topic", help="Quiz topic, e.g. 'Every NBA MVP since 2010'")
    parser.add_argument("--max-questions", type=int, help="Cap for generative providers")
    parser.add_argument("--time-limit", type=int, default=DEFAULT_TIME_LIMIT, help="Time limit in seconds")
    args = parser.parse_args()

    resolver = build_default_resolver(show_progress=True)
    try:
        payload = resolver.resolve_topic(
            args.topic,
            time_limit=args.time_limit,
            max_questions=args.max_questions,
        )
    except (EmptyResultError, SourceUnavailableError) as e:
        print(json.dumps(e.to_dict(), indent=2))
        raise SystemExit(1)

    print(json.dumps(payload.to_dict(), indent=2))
    print(f"\n[source: {payload.source}]")
