"""
Pytest configuration and fixtures for SickoHoops tests.

Nothing here touches the network: HTTP sessions and provider clients are
replaced with mocks or small fakes.
"""

from datetime import datetime
from typing import Optional
from unittest.mock import MagicMock

import pytest

from sickohoops.errors import ProviderError
from sickohoops.llm.providers import GenerativeProvider, LLMResponse
from sickohoops.quiz.models import AnswerRecord, AnswerSet


class FakeProvider(GenerativeProvider):
    """Generative provider returning canned text (or failing)."""

    def __init__(self, name: str, content: str = "", error: Optional[Exception] = None, max_items: int = 30):
        self.name = name
        self.content = content
        self.error = error
        self.default_max_items = max_items
        self.model = f"{name}-test"
        self.prompts = []

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.content, model=self.model, provider=self.name)


def leaders_response(season: str, rows: list[tuple]) -> MagicMock:
    """Mock requests.Response for a leagueleaders call; rows are (player, team, pts)."""
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {
        "resource": "leagueleaders",
        "parameters": {"Season": season},
        "resultSet": {
            "name": "LeagueLeaders",
            "headers": ["PLAYER_ID", "RANK", "PLAYER_NAME", "TEAM_ABBREVIATION", "GP", "PTS"],
            "rowSet": [
                [1000 + i, i + 1, player, team, 70, pts]
                for i, (player, team, pts) in enumerate(rows)
            ],
        },
    }
    return response


GENERATED_QUIZ = """Here is your quiz:
```json
{
  "title": "NBA MVPs Since 2021",
  "description": "Every regular season MVP since 2021",
  "answers": [
    {"points": 27.1, "player": "Nikola Jokić", "team": "2021-DEN", "year": "2021"},
    {"points": 27.1, "player": "Nikola Jokić", "team": "2022-DEN", "year": "2022"},
    {"points": 33.1, "player": "Joel Embiid", "team": "2023-PHI", "year": "2023"}
  ],
  "timeLimit": 600
}
```
"""


@pytest.fixture
def generated_quiz():
    return GENERATED_QUIZ


@pytest.fixture
def fake_provider():
    """Factory for FakeProvider instances."""
    def _make(name="fake", content=GENERATED_QUIZ, error=None, max_items=30):
        return FakeProvider(name, content=content, error=error, max_items=max_items)
    return _make


@pytest.fixture
def failing_provider():
    return FakeProvider("down", error=ProviderError("timed out"))


@pytest.fixture
def stats_session():
    """requests.Session mock serving three seasons of scoring leaders."""
    seasons = {
        "2019-20": [("James Harden", "HOU", 34.3), ("Bradley Beal", "WAS", 30.5)],
        "2020-21": [("Stephen Curry", "GSW", 32.0), ("Bradley Beal", "WAS", 31.3)],
        "2021-22": [("Joel Embiid", "PHI", 30.6), ("LeBron James", "LAL", 30.3)],
    }
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = lambda url, params=None, timeout=None: leaders_response(
        params["Season"], seasons.get(params["Season"], [])
    )
    return session


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 3, 1)


@pytest.fixture
def sample_answers():
    """Three records, one of them a repeat player."""
    return AnswerSet.from_records([
        AnswerRecord(player="Stephen Curry", team="2016-GSW", year="2016", stat_value=30.1),
        AnswerRecord(player="Nikola Jokić", team="2021-DEN", year="2021", stat_value=26.4),
        AnswerRecord(player="Stephen Curry", team="2015-GSW", year="2015", stat_value=23.8),
    ])
