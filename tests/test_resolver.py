"""
Tests for the resolver chain, including the end-to-end topic scenarios.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from sickohoops.errors import EmptyResultError, ResolutionCancelled, SourceUnavailableError
from sickohoops.intent.classifier import classify_topic
from sickohoops.sources.base import FailureReason, Strategy, StrategyResult
from sickohoops.sources.curated import curated_strategies
from sickohoops.sources.generative import GenerativeStrategy
from sickohoops.sources.resolver import DataSourceResolver, build_default_resolver
from sickohoops.sources.stats_api import LiveStatsStrategy, NBAStatsClient


class StubStrategy(Strategy):
    """Strategy returning a fixed result and counting attempts."""

    def __init__(self, name, result=None, error=None):
        self.name = name
        self.result = result
        self.error = error
        self.calls = 0

    def attempt(self, request):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def failed(name, reason):
    return StubStrategy(name, StrategyResult.failed(name, reason, "stub"))


def live_stats(session, sleeps=None, clock=None):
    return LiveStatsStrategy(
        client=NBAStatsClient(session=session),
        sleep=(sleeps.append if sleeps is not None else lambda _: None),
        clock=clock or (lambda: datetime(2024, 3, 1)),
    )


def resolve(resolver, topic, **kwargs):
    return resolver.resolve(classify_topic(topic, 2024), topic, **kwargs)


class TestResolverLoop:
    """Ordering, fall-through and terminal errors."""

    def test_first_success_wins(self, fake_provider):
        """The first successful strategy wins and later ones are never tried."""
        later = StubStrategy("later")
        resolver = DataSourceResolver([
            failed("a", FailureReason.NOT_APPLICABLE),
            GenerativeStrategy(fake_provider("openai")),
            later,
        ])
        payload = resolve(resolver, "Every NBA MVP since 2021")
        assert payload.source == "generative_openai"
        assert later.calls == 0

    def test_all_unavailable(self, failing_provider):
        """All strategies failing raises SourceUnavailableError."""
        resolver = DataSourceResolver([
            failed("a", FailureReason.NOT_APPLICABLE),
            GenerativeStrategy(failing_provider),
        ])
        with pytest.raises(SourceUnavailableError) as exc_info:
            resolve(resolver, "Every NBA MVP")
        assert [f.strategy for f in exc_info.value.failures] == ["a", "generative_down"]
        assert "generative_down" in exc_info.value.details

    def test_empty_result_reported_distinctly(self, fake_provider, failing_provider):
        """An empty result anywhere in the chain raises EmptyResultError."""
        resolver = DataSourceResolver([
            GenerativeStrategy(fake_provider("openai", content='{"answers": []}')),
            GenerativeStrategy(failing_provider),
        ])
        with pytest.raises(EmptyResultError) as exc_info:
            resolve(resolver, "Every NBA MVP")
        assert exc_info.value.to_dict()["error"] == "EmptyResult"

    def test_empty_result_falls_through(self, fake_provider):
        """An empty result falls through to the next strategy."""
        second = fake_provider("anthropic")
        resolver = DataSourceResolver([
            GenerativeStrategy(fake_provider("openai", content='{"answers": []}')),
            GenerativeStrategy(second),
        ])
        assert resolve(resolver, "Every NBA MVP").source == "generative_anthropic"
        assert len(second.prompts) == 1

    def test_raising_strategy_counts_as_unavailable(self, fake_provider):
        """An exception inside a strategy is treated as unavailable."""
        broken = StubStrategy("broken", error=KeyError("boom"))
        resolver = DataSourceResolver([broken, GenerativeStrategy(fake_provider("openai"))])
        assert resolve(resolver, "Every NBA MVP").source == "generative_openai"

    def test_success_with_zero_answers_not_accepted(self):
        """A success without answers is not accepted."""
        resolver = DataSourceResolver([StubStrategy("nothing", StrategyResult())])
        with pytest.raises(EmptyResultError):
            resolve(resolver, "Every NBA MVP")

    def test_no_strategies(self):
        """An empty chain is unavailable."""
        with pytest.raises(SourceUnavailableError):
            resolve(DataSourceResolver([]), "Every NBA MVP")

    def test_cancellation(self, fake_provider):
        """A cancelled resolution stops before the next strategy."""
        provider = fake_provider("openai")
        resolver = DataSourceResolver([
            failed("a", FailureReason.NOT_APPLICABLE),
            GenerativeStrategy(provider),
        ])
        checks = iter([False, True])
        with pytest.raises(ResolutionCancelled):
            resolve(resolver, "Every NBA MVP", is_cancelled=lambda: next(checks))
        assert provider.prompts == []

    def test_resolve_topic_classifies(self, fake_provider):
        """resolve_topic classifies the topic itself."""
        resolver = DataSourceResolver([GenerativeStrategy(fake_provider("openai"))])
        assert resolver.resolve_topic("Every NBA MVP since 2021").source == "generative_openai"


class TestScenarios:
    """Full default-shaped chains with every external call faked."""

    def chain(self, session, providers, sleeps=None):
        return DataSourceResolver([
            *curated_strategies(),
            live_stats(session, sleeps),
            *(GenerativeStrategy(p) for p in providers),
        ])

    def test_curated_topic_never_touches_network(self, stats_session, fake_provider):
        """A curated topic is served without any request."""
        provider = fake_provider("openai")
        resolver = self.chain(stats_session, [provider])

        payload = resolve(resolver, "Every player with 10+ three-pointers in a game")

        assert payload.source == "curated_three_point_games"
        assert len(payload.answers) > 0
        stats_session.get.assert_not_called()
        assert provider.prompts == []

    def test_yearly_points_leaders_use_live_stats(self, stats_session, fake_provider):
        """Yearly points leaders come from live stats, one request per season."""
        provider = fake_provider("openai")
        sleeps = []
        resolver = self.chain(stats_session, [provider], sleeps)

        topic = "Top 5 leaders in points per game each year from 2020 to 2022"
        intent = classify_topic(topic, 2024)
        assert (intent.stat_category.value, intent.year_range.start, intent.year_range.end, intent.limit) == (
            "points", 2020, 2022, 5,
        )

        payload = resolver.resolve(intent, topic)

        assert payload.source == "live_stats"
        assert stats_session.get.call_count == 3
        assert all(c.kwargs["timeout"] == 10 for c in stats_session.get.call_args_list)
        assert sleeps == [0.5, 0.5]
        assert provider.prompts == []

    def test_live_failure_then_generative_fallback(self, fake_provider):
        """A live stats failure falls back to the generative provider."""
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = requests.ConnectionError("refused")
        provider_a = fake_provider("openai", content="I'm not sure, here are some thoughts {no json here")
        provider_b = fake_provider("anthropic")
        resolver = self.chain(session, [provider_a, provider_b])

        payload = resolve(resolver, "Top 5 leaders in points per game each year from 2020 to 2022")

        assert payload.source == "generative_anthropic"
        assert len(provider_a.prompts) == 1
        assert len(provider_b.prompts) == 1
        assert [r.player for r in payload.answers] == ["Joel Embiid", "Nikola Jokić", "Nikola Jokić"]


class TestBuildDefaultResolver:
    """Default chain composition."""

    def test_order(self, fake_provider):
        """Strategies run curated first, then live stats, then providers in order."""
        resolver = build_default_resolver(providers=[fake_provider("openai"), fake_provider("anthropic")])
        assert [s.name for s in resolver.strategies] == [
            "curated_three_point_games",
            "curated_triple_double_seasons",
            "curated_multi_season_blocks",
            "live_stats",
            "generative_openai",
            "generative_anthropic",
        ]
