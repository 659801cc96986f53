"""
Curated quiz datasets.

Hand-verified answer tables for a few topics that generative providers get
wrong often. Each strategy only serves its table when the topic matches its
own narrow pattern; a loosely related topic (a different threshold, a
specific team or year range, playoffs) is left to the other strategies.
"""

import logging
import re
from typing import Optional

from sickohoops.intent.classifier import DEFAULT_THREE_POINT_THRESHOLD, StatCategory
from sickohoops.quiz.models import AnswerRecord, AnswerSet, QuizPayload
from sickohoops.sources.base import QuizRequest, Strategy, StrategyResult

logger = logging.getLogger(__name__)


def _rows(data: list[tuple]) -> list[AnswerRecord]:
    """(stat, player, team code, season end year) -> records"""
    return [
        AnswerRecord(player=player, team=f"{year}-{team}", year=str(year), stat_value=stat)
        for stat, player, team, year in data
    ]


# Players with 10+ three-pointers in a game: (makes, player, team, season)
THREE_POINT_GAMES = _rows([
    (13, "Klay Thompson", "GSW", 2018),
    (12, "Stephen Curry", "GSW", 2016),
    (12, "Kobe Bryant", "LAL", 2003),
    (12, "Zach LaVine", "CHI", 2019),
    (12, "Donyell Marshall", "TOR", 2005),
    (11, "Stephen Curry", "GSW", 2016),
    (11, "Stephen Curry", "GSW", 2021),
    (11, "Klay Thompson", "GSW", 2019),
    (11, "Damian Lillard", "POR", 2020),
    (11, "Damian Lillard", "POR", 2023),
    (11, "Lauri Markkanen", "CHI", 2019),
    (10, "Stephen Curry", "GSW", 2016),
    (10, "Stephen Curry", "GSW", 2018),
    (10, "Stephen Curry", "GSW", 2019),
    (10, "Stephen Curry", "GSW", 2021),
    (10, "Stephen Curry", "GSW", 2022),
    (10, "Klay Thompson", "GSW", 2016),
    (10, "Klay Thompson", "GSW", 2016),
    (10, "Klay Thompson", "GSW", 2019),
    (10, "Damian Lillard", "POR", 2020),
    (10, "Damian Lillard", "POR", 2023),
    (10, "Zach LaVine", "CHI", 2021),
    (10, "J.R. Smith", "NYK", 2014),
    (10, "Marcus Smart", "BOS", 2020),
    (10, "Ty Lawson", "DEN", 2011),
    (10, "J.J. Redick", "LAC", 2016),
    (10, "Joe Johnson", "BKN", 2013),
    (10, "Ben Gordon", "DET", 2012),
    (10, "Dennis Scott", "ORL", 1996),
])

# Players who averaged a triple-double for a season: (ppg, player, team, season)
TRIPLE_DOUBLE_SEASONS = _rows([
    (29.6, "Nikola Jokić", "DEN", 2025),
    (22.2, "Russell Westbrook", "WAS", 2021),
    (22.9, "Russell Westbrook", "OKC", 2019),
    (25.4, "Russell Westbrook", "OKC", 2018),
    (31.6, "Russell Westbrook", "OKC", 2017),
    (30.8, "Oscar Robertson", "CIN", 1962),
])

# Multi-time blocks per game leaders: (bpg, player, team, season)
MULTI_SEASON_BLOCKS_LEADERS = _rows([
    (2.7, "Myles Turner", "IND", 2019),
    (3.4, "Myles Turner", "IND", 2021),
    (3.7, "Hassan Whiteside", "MIA", 2016),
    (2.9, "Hassan Whiteside", "POR", 2020),
    (2.8, "Anthony Davis", "NOP", 2014),
    (2.9, "Anthony Davis", "NOP", 2015),
    (2.6, "Anthony Davis", "NOP", 2018),
    (3.7, "Serge Ibaka", "OKC", 2012),
    (3.0, "Serge Ibaka", "OKC", 2013),
    (2.9, "Dwight Howard", "ORL", 2009),
    (2.8, "Dwight Howard", "ORL", 2010),
    (3.7, "Marcus Camby", "TOR", 1998),
    (3.3, "Marcus Camby", "DEN", 2007),
    (3.6, "Marcus Camby", "DEN", 2008),
    (3.9, "Alonzo Mourning", "MIA", 1999),
    (3.7, "Alonzo Mourning", "MIA", 2000),
    (4.1, "Dikembe Mutombo", "DEN", 1994),
    (3.9, "Dikembe Mutombo", "DEN", 1995),
    (4.5, "Dikembe Mutombo", "DEN", 1996),
    (4.6, "Hakeem Olajuwon", "HOU", 1990),
    (3.9, "Hakeem Olajuwon", "HOU", 1991),
    (4.2, "Hakeem Olajuwon", "HOU", 1993),
    (5.0, "Manute Bol", "WSB", 1986),
    (4.3, "Manute Bol", "GSW", 1989),
    (4.3, "Mark Eaton", "UTA", 1984),
    (5.6, "Mark Eaton", "UTA", 1985),
    (4.1, "Mark Eaton", "UTA", 1987),
    (3.7, "Mark Eaton", "UTA", 1988),
    (3.3, "Kareem Abdul-Jabbar", "MIL", 1975),
    (4.1, "Kareem Abdul-Jabbar", "LAL", 1976),
    (4.0, "Kareem Abdul-Jabbar", "LAL", 1979),
    (3.4, "Kareem Abdul-Jabbar", "LAL", 1980),
])


# Qualifiers that make a curated table the wrong answer
NARROWING_PATTERN = re.compile(
    r"\b(?:playoffs?|postseason|finals|rookies?|wnba|college|ncaa|all[\s-]star|olympics?)\b",
    re.IGNORECASE,
)
EXPLICIT_YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")


class CuratedStrategy(Strategy):
    """
    Serve a hand-verified table for an exactly matching topic shape.

    Subclasses set name, pattern, categories, records, title and
    description, and may override select() to filter the table.
    """

    pattern: re.Pattern
    categories: tuple = ()
    records: list[AnswerRecord] = []
    title = ""
    description = ""

    def matches(self, request: QuizRequest) -> Optional[str]:
        """Return None when the topic is in scope, else why it isn't."""
        if self.categories and request.intent.stat_category not in self.categories:
            return f"category {request.intent.stat_category.value}"
        if not self.pattern.search(request.topic):
            return "topic does not match curated pattern"
        if NARROWING_PATTERN.search(request.topic):
            return "topic is narrower than the curated table"
        if EXPLICIT_YEAR_PATTERN.search(request.topic) or request.intent.team_filter:
            return "topic restricts years or team"
        return None

    def select(self, request: QuizRequest) -> list[AnswerRecord]:
        return list(self.records)

    def build_title(self, request: QuizRequest) -> str:
        return self.title

    def build_description(self, request: QuizRequest) -> str:
        return self.description

    def attempt(self, request: QuizRequest) -> StrategyResult:
        mismatch = self.matches(request)
        if mismatch:
            return self.not_applicable(mismatch)

        records = self.select(request)
        if not records:
            return self.not_applicable("no curated records for this request")

        logger.info(f"Serving curated dataset '{self.name}' ({len(records)} answers)")
        return StrategyResult.ok(QuizPayload(
            title=self.build_title(request),
            description=self.build_description(request),
            answers=AnswerSet.from_records(records),
            time_limit=request.time_limit,
            source=self.name,
        ))


class ThreePointGameStrategy(CuratedStrategy):
    """Players with N+ three-pointers in a single game (N >= 10)."""

    name = "curated_three_point_games"
    pattern = re.compile(
        r"\b\d+\s*(?:\+|or\s+more)\s*(?:three[\s-]?pointers?|3[\s-]?pointers?|threes)\s+(?:made\s+)?in\s+(?:a|one)\s+(?:single\s+)?game",
        re.IGNORECASE,
    )
    categories = (StatCategory.THREE_POINT_MAKES,)
    records = THREE_POINT_GAMES

    def _threshold(self, request: QuizRequest) -> int:
        return request.intent.threshold or DEFAULT_THREE_POINT_THRESHOLD

    def select(self, request: QuizRequest) -> list[AnswerRecord]:
        threshold = self._threshold(request)
        # The table starts at 10, so lower thresholds would be incomplete
        if threshold < DEFAULT_THREE_POINT_THRESHOLD:
            return []
        return [r for r in self.records if r.stat_value >= threshold]

    def build_title(self, request: QuizRequest) -> str:
        return f"NBA Players with {self._threshold(request)}+ Three-Pointers in a Game"

    def build_description(self, request: QuizRequest) -> str:
        threshold = self._threshold(request)
        return f"Quiz on players who have made {threshold} or more three-pointers in a single NBA game."


class TripleDoubleSeasonStrategy(CuratedStrategy):
    """Every player to average a triple-double over a season."""

    name = "curated_triple_double_seasons"
    pattern = re.compile(
        r"averag\w*\s+(?:a\s+)?triple[\s-]?doubles?\s+(?:for|in|over|during)\s+(?:a|an\s+entire|the|one)\s+(?:full\s+)?season",
        re.IGNORECASE,
    )
    categories = (StatCategory.TRIPLE_DOUBLE_SEASON,)
    records = TRIPLE_DOUBLE_SEASONS
    title = "NBA Players Who Averaged a Triple-Double for a Season"
    description = "Quiz on every player to average a triple-double over a full NBA regular season (points per game shown)."


class MultiSeasonBlocksStrategy(CuratedStrategy):
    """Players who led the league in blocks per game more than once."""

    name = "curated_multi_season_blocks"
    pattern = re.compile(
        r"led\s+the\s+(?:league|nba)\s+in\s+(?:blocks|blocked\s+shots)\b.*?"
        r"\b(?:multiple|several|more\s+than\s+one|two\s+or\s+more)\s+(?:seasons|times|years)"
        r"|(?:multiple|several)\s+(?:blocks?|shot[\s-]blocking)\s+titles",
        re.IGNORECASE,
    )
    categories = (StatCategory.BLOCKS, StatCategory.GENERIC)
    records = MULTI_SEASON_BLOCKS_LEADERS
    title = "NBA Players Who Led the League in Blocks Multiple Times"
    description = "Quiz on every player with more than one blocks-per-game title (blocks per game shown)."


def curated_strategies() -> list[CuratedStrategy]:
    """Curated strategies in the order the resolver tries them."""
    return [
        ThreePointGameStrategy(),
        TripleDoubleSeasonStrategy(),
        MultiSeasonBlocksStrategy(),
    ]
