"""Quiz data acquisition strategies and the resolver that chains them."""

from sickohoops.sources.base import (
    FailureReason,
    QuizRequest,
    Strategy,
    StrategyFailure,
    StrategyResult,
)
from sickohoops.sources.curated import (
    MultiSeasonBlocksStrategy,
    ThreePointGameStrategy,
    TripleDoubleSeasonStrategy,
    curated_strategies,
)
from sickohoops.sources.generative import GenerativeStrategy
from sickohoops.sources.resolver import DataSourceResolver, build_default_resolver
from sickohoops.sources.stats_api import LiveStatsStrategy, NBAStatsClient

__all__ = [
    "DataSourceResolver",
    "FailureReason",
    "GenerativeStrategy",
    "LiveStatsStrategy",
    "MultiSeasonBlocksStrategy",
    "NBAStatsClient",
    "QuizRequest",
    "Strategy",
    "StrategyFailure",
    "StrategyResult",
    "ThreePointGameStrategy",
    "TripleDoubleSeasonStrategy",
    "build_default_resolver",
    "curated_strategies",
]
