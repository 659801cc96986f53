"""
Live NBA stats source (stats.nba.com league leaders).

stats.nba.com rejects requests without browser-like headers and
rate-limits bursts, so every request carries those headers, a fixed
timeout, and a fixed delay before the next one. Seasons are fetched one at
a time; if any season fails the whole strategy fails, partial seasons are
never returned.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

import pandas as pd
import requests
from tqdm import tqdm

from sickohoops.config import NBA_STATS_BASE_URL, STATS_REQUEST_DELAY, STATS_REQUEST_TIMEOUT
from sickohoops.errors import StatsAPIError
from sickohoops.intent.classifier import StatCategory
from sickohoops.quiz.models import TEAM_PLACEHOLDER, AnswerRecord, AnswerSet, QuizPayload, coerce_stat
from sickohoops.sources.base import FailureReason, QuizRequest, Strategy, StrategyResult

logger = logging.getLogger(__name__)


NBA_API_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Referer": "https://www.nba.com/",
    "Origin": "https://www.nba.com",
    "Accept-Language": "en-US,en;q=0.9",
}

# StatCategory -> leagueleaders StatCategory parameter / value column
LEADER_COLUMNS = {
    StatCategory.POINTS: "PTS",
    StatCategory.REBOUNDS: "REB",
    StatCategory.ASSISTS: "AST",
    StatCategory.BLOCKS: "BLK",
    StatCategory.STEALS: "STL",
    StatCategory.THREE_POINT_MAKES: "FG3M",
}

REQUIRED_COLUMNS = ("PLAYER_NAME", "TEAM_ABBREVIATION")


def season_id(end_year: int) -> str:
    """Season-end year -> stats.nba.com season id (2023 -> "2022-23")."""
    return f"{end_year - 1}-{str(end_year)[-2:]}"


class NBAStatsClient:
    """
    Minimal client for the stats.nba.com leagueleaders endpoint.

    Example:
        >>> client = NBAStatsClient()
        >>> leaders = client.fetch_league_leaders(2023, limit=5)
        >>> leaders[["PLAYER_NAME", "PTS"]]
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = STATS_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or NBA_STATS_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(NBA_API_HEADERS)

    def fetch_league_leaders(
        self,
        end_year: int,
        stat: str = "PTS",
        limit: Optional[int] = None,
        per_mode: str = "PerGame",
    ) -> pd.DataFrame:
        """
        Fetch the regular season leaders for one season.

        Args:
            end_year: Season-end year (2023 for the 2022-23 season)
            stat: leagueleaders StatCategory (PTS, REB, AST, ...)
            limit: Keep only the first N rows
            per_mode: PerGame or Totals

        Returns:
            DataFrame with the resultSet headers as columns, in rank order

        Raises:
            StatsAPIError: on any request failure or malformed response
        """
        params = {
            "LeagueID": "00",
            "PerMode": per_mode,
            "Scope": "S",
            "Season": season_id(end_year),
            "SeasonType": "Regular Season",
            "StatCategory": stat,
        }

        try:
            response = self.session.get(
                f"{self.base_url}/leagueleaders",
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise StatsAPIError(f"League leaders request failed for {params['Season']}: {e}") from e

        result_set = data.get("resultSet") if isinstance(data, dict) else None
        if not isinstance(result_set, dict) or "headers" not in result_set or "rowSet" not in result_set:
            raise StatsAPIError(f"Malformed league leaders response for {params['Season']}")

        frame = pd.DataFrame(result_set["rowSet"], columns=result_set["headers"])
        missing = [c for c in (*REQUIRED_COLUMNS, stat) if c not in frame.columns]
        if missing:
            raise StatsAPIError(f"League leaders response missing columns: {missing}")

        if limit is not None:
            frame = frame.head(limit)
        return frame


def frame_to_records(frame: pd.DataFrame, end_year: int, stat: str) -> list[AnswerRecord]:
    """Convert a leaders DataFrame to answer records for one season."""
    records = []
    for row in frame.to_dict("records"):
        player = row.get("PLAYER_NAME")
        if not player or pd.isna(player):
            continue
        team = row.get("TEAM_ABBREVIATION")
        team = team if isinstance(team, str) and team.strip() else TEAM_PLACEHOLDER
        value = row.get(stat)
        records.append(AnswerRecord(
            player=str(player),
            team=f"{end_year}-{team}",
            year=str(end_year),
            stat_value=coerce_stat(value),
        ))
    return records


class LiveStatsStrategy(Strategy):
    """
    Yearly league leaders from stats.nba.com.

    Applies only to POINTS intents. One request per season in the intent's
    year range (clamped to the current year), strictly sequential, with a
    fixed delay between requests.
    """

    name = "live_stats"
    categories = (StatCategory.POINTS,)

    def __init__(
        self,
        client: Optional[NBAStatsClient] = None,
        request_delay: float = STATS_REQUEST_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
        show_progress: bool = False,
    ):
        self.client = client or NBAStatsClient()
        self.request_delay = request_delay
        self.sleep = sleep
        self.clock = clock
        self.show_progress = show_progress

    def seasons(self, request: QuizRequest) -> list[int]:
        """Season-end years to fetch, never past the current year."""
        year_range = request.intent.year_range
        last = min(year_range.end, self.clock().year)
        return list(range(year_range.start, last + 1))

    def attempt(self, request: QuizRequest) -> StrategyResult:
        intent = request.intent
        if intent.stat_category not in self.categories:
            return self.not_applicable(f"category {intent.stat_category.value}")

        seasons = self.seasons(request)
        if not seasons:
            return self.not_applicable("no seasons in range")

        stat = LEADER_COLUMNS[intent.stat_category]
        records = []

        try:
            for i, year in enumerate(tqdm(seasons, desc="Seasons", disable=not self.show_progress)):
                if i > 0:
                    self.sleep(self.request_delay)
                frame = self.client.fetch_league_leaders(year, stat=stat, limit=intent.limit)
                records.extend(frame_to_records(frame, year, stat))
        except StatsAPIError as e:
            logger.warning(f"Live stats failed, discarding partial results: {e}")
            return StrategyResult.failed(self.name, FailureReason.SOURCE_UNAVAILABLE, str(e))

        if not records:
            return StrategyResult.failed(self.name, FailureReason.EMPTY_RESULT, "no leaders returned")

        label = intent.category_label or stat.lower()
        start, end = seasons[0], intent.year_range.end
        logger.info(f"Live stats returned {len(records)} answers over {len(seasons)} seasons")
        return StrategyResult.ok(QuizPayload(
            title=request.topic,
            description=f"Top {intent.limit} leaders in {label} each year from {start} to {end}",
            answers=AnswerSet.from_records(records),
            time_limit=request.time_limit,
            source=self.name,
        ))
