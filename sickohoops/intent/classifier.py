"""
Topic classification for quiz requests.

Turns a free-text topic ("Top 5 leaders in points per game each year
from 2020 to 2022") into a QueryIntent. Classification is an ordered table
of (name, pattern, builder) rules: the first rule whose pattern matches
builds the intent. Anything unmatched falls through to GENERIC with year
and team extraction.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class StatCategory(str, Enum):
    """Stat a quiz is about."""
    POINTS = "points"
    REBOUNDS = "rebounds"
    ASSISTS = "assists"
    BLOCKS = "blocks"
    STEALS = "steals"
    THREE_POINT_MAKES = "three_point_makes"
    TRIPLE_DOUBLE_SEASON = "triple_double_season"
    GENERIC = "generic"


@dataclass(frozen=True)
class YearRange:
    """Inclusive range of season-end years."""
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Year range start {self.start} is after end {self.end}")

    def years(self) -> list[int]:
        return list(range(self.start, self.end + 1))


@dataclass(frozen=True)
class QueryIntent:
    """Structured representation of a quiz topic."""
    stat_category: StatCategory
    year_range: YearRange
    limit: int
    team_filter: Optional[str] = None
    threshold: Optional[int] = None
    category_label: Optional[str] = None
    rule: str = "generic"
    defaulted: bool = False

    def __post_init__(self):
        if self.limit <= 0:
            raise ValueError(f"Intent limit must be positive, got {self.limit}")


DEFAULT_START_YEAR = 2010
# Season-end year of the first BAA/NBA season (1946-47)
FIRST_SEASON_YEAR = 1947
DEFAULT_THREE_POINT_THRESHOLD = 10
DEFAULT_RESPONSE_SIZE = 15

# Keyword -> category for "top N leaders in <category>" topics.
# Checked in order, so "three" wins over "points" in "three pointers".
CATEGORY_KEYWORDS = [
    (("three", "3pt", "3-point", "3 point", "3pm", "threes"), StatCategory.THREE_POINT_MAKES),
    (("points", "ppg", "scoring"), StatCategory.POINTS),
    (("rebounds", "rebounding", "rpg"), StatCategory.REBOUNDS),
    (("assists", "apg"), StatCategory.ASSISTS),
    (("blocks", "blocked shots", "bpg"), StatCategory.BLOCKS),
    (("steals", "spg"), StatCategory.STEALS),
]

# Franchise nicknames and cities -> team code
TEAM_KEYWORDS = {
    "hawks": "ATL", "atlanta": "ATL",
    "celtics": "BOS", "boston": "BOS",
    "nets": "BKN", "brooklyn": "BKN",
    "hornets": "CHA", "charlotte": "CHA",
    "bulls": "CHI", "chicago": "CHI",
    "cavaliers": "CLE", "cavs": "CLE", "cleveland": "CLE",
    "mavericks": "DAL", "mavs": "DAL", "dallas": "DAL",
    "nuggets": "DEN", "denver": "DEN",
    "pistons": "DET", "detroit": "DET",
    "warriors": "GSW", "golden state": "GSW",
    "rockets": "HOU", "houston": "HOU",
    "pacers": "IND", "indiana": "IND",
    "clippers": "LAC",
    "lakers": "LAL",
    "grizzlies": "MEM", "memphis": "MEM",
    "heat": "MIA", "miami": "MIA",
    "bucks": "MIL", "milwaukee": "MIL",
    "timberwolves": "MIN", "wolves": "MIN", "minnesota": "MIN",
    "pelicans": "NOP", "new orleans": "NOP",
    "knicks": "NYK", "new york": "NYK",
    "thunder": "OKC", "oklahoma city": "OKC",
    "magic": "ORL", "orlando": "ORL",
    "76ers": "PHI", "sixers": "PHI", "philadelphia": "PHI",
    "suns": "PHX", "phoenix": "PHX",
    "trail blazers": "POR", "blazers": "POR", "portland": "POR",
    "kings": "SAC", "sacramento": "SAC",
    "spurs": "SAS", "san antonio": "SAS",
    "raptors": "TOR", "toronto": "TOR",
    "jazz": "UTA", "utah": "UTA",
    "wizards": "WAS", "washington": "WAS",
}

THREE_POINT_GAME_PATTERN = re.compile(
    r"(?:(\d+)\s*\+?\s*(?:or\s+more\s+)?)?"
    r"(?:three[\s-]?pointers?|3[\s-]?pointers?|threes|3s)\s+"
    r"(?:made\s+)?in\s+(?:a|one)\s+(?:single\s+)?game",
    re.IGNORECASE,
)

TRIPLE_DOUBLE_SEASON_PATTERN = re.compile(
    r"averag\w*\s+(?:a\s+)?triple[\s-]?doubles?\s+(?:for|in|over|during)\s+(?:a|an\s+entire|the|one)\s+(?:full\s+)?season"
    r"|triple[\s-]?double\s+(?:season|average)",
    re.IGNORECASE,
)

YEARLY_LEADERS_PATTERN = re.compile(
    r"top\s+(\d+)\s+leaders?\s+in\s+(.+?)\s+each\s+year\s+(?:from|since)\s+(\d{4})(?:\s*(?:to|-|through|until)\s*(\d{4}))?",
    re.IGNORECASE,
)

YEAR_PATTERN = re.compile(r"\b(19\d{2}|20\d{2})\b")

TEAM_PREPOSITION_PATTERN = re.compile(
    r"\b(?:for|with|on)\s+the\s+([A-Za-z0-9][A-Za-z0-9 .'-]*?)(?=\s+(?:since|from|in|during|between|before|after|who|with|to)\b|[,.?!]|$)",
    re.IGNORECASE,
)
TEAM_SUFFIX_PATTERN = re.compile(
    r"\b([A-Za-z0-9][A-Za-z0-9.'-]*(?:\s+[A-Za-z0-9][A-Za-z0-9.'-]*)?)\s+(?:team|franchise)\b",
    re.IGNORECASE,
)


def current_year() -> int:
    return datetime.now().year


def estimate_response_size(topic: str) -> int:
    """
    Estimate how many answers a topic should produce.

    Historical lists are large; "top N" and "N best" topics ask for N.
    """
    if re.search(r"all|every|complete|full|history|since|each year", topic, re.IGNORECASE):
        if re.search(r"mvp|champion|scoring leader|all-star|hall of fame", topic, re.IGNORECASE):
            return 50
        return 30

    match = re.search(r"top\s+(\d+)|(\d+)\s+best", topic, re.IGNORECASE)
    if match:
        number = int(match.group(1) or match.group(2))
        if number > 0:
            return number

    return DEFAULT_RESPONSE_SIZE


def map_category(text: str) -> Optional[StatCategory]:
    """Map a category phrase ("points per game") to a StatCategory."""
    lowered = text.lower()
    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


def extract_years(topic: str, this_year: int) -> YearRange:
    """
    Extract a year range from free text.

    First 4-digit year starts the range, the second ends it; a lone year
    spans ten seasons. No years at all gives 2010 to the current year.
    Only 19xx and 20xx numbers count as years, so stat values such as
    "1000 points" or "3000 rebounds" are never read as seasons.
    """
    years = [int(y) for y in YEAR_PATTERN.findall(topic)]
    if not years:
        return YearRange(min(DEFAULT_START_YEAR, this_year), this_year)

    start = years[0]
    end = years[1] if len(years) > 1 else start + 10
    if start > end:
        start, end = end, start
    return YearRange(start, end)


def team_code_for(text: str) -> Optional[str]:
    """Return the 3-letter code for a franchise nickname or city found in text."""
    lowered = text.lower()
    # Longest keywords first so "golden state" beats "state"-like fragments
    for keyword in sorted(TEAM_KEYWORDS, key=len, reverse=True):
        if re.search(rf"\b{re.escape(keyword)}\b", lowered):
            return TEAM_KEYWORDS[keyword]
    return None


def extract_team(topic: str) -> Optional[str]:
    """
    Find a team mentioned in the topic.

    Known nicknames/cities return the 3-letter code; otherwise the phrase
    after "for/with/on the" or before "team/franchise" is returned as-is.
    """
    code = team_code_for(topic)
    if code:
        return code

    for pattern in (TEAM_PREPOSITION_PATTERN, TEAM_SUFFIX_PATTERN):
        match = pattern.search(topic)
        if match:
            name = match.group(1).strip()
            if name and name.lower() not in ("same", "season", "nba", "league"):
                return name

    return None


# =============================================================================
# Rule builders
# =============================================================================

def _build_three_point_game(match: re.Match, topic: str, this_year: int) -> QueryIntent:
    threshold = int(match.group(1)) if match.group(1) else DEFAULT_THREE_POINT_THRESHOLD
    return QueryIntent(
        stat_category=StatCategory.THREE_POINT_MAKES,
        year_range=extract_years(topic, this_year),
        limit=estimate_response_size(topic),
        team_filter=extract_team(topic),
        threshold=threshold,
        category_label="three-pointers in a game",
        rule="three_point_game",
    )


def _build_triple_double_season(match: re.Match, topic: str, this_year: int) -> QueryIntent:
    return QueryIntent(
        stat_category=StatCategory.TRIPLE_DOUBLE_SEASON,
        year_range=extract_years(topic, this_year),
        limit=estimate_response_size(topic),
        team_filter=extract_team(topic),
        category_label="triple-double season averages",
        rule="triple_double_season",
    )


def _build_yearly_leaders(match: re.Match, topic: str, this_year: int) -> QueryIntent:
    limit = int(match.group(1))
    label = match.group(2).strip()
    start = int(match.group(3))
    end = int(match.group(4)) if match.group(4) else this_year
    if start > end:
        start, end = end, start
    # Nothing was recorded before the league's first season
    start, end = max(start, FIRST_SEASON_YEAR), max(end, FIRST_SEASON_YEAR)

    category = map_category(label)
    return QueryIntent(
        stat_category=category or StatCategory.GENERIC,
        year_range=YearRange(start, end),
        limit=limit if limit > 0 else DEFAULT_RESPONSE_SIZE,
        team_filter=extract_team(topic),
        category_label=label,
        rule="yearly_leaders",
    )


Rule = tuple[str, re.Pattern, Callable[[re.Match, str, int], QueryIntent]]

# Priority order matters: the first matching rule wins
RULES: list[Rule] = [
    ("three_point_game", THREE_POINT_GAME_PATTERN, _build_three_point_game),
    ("triple_double_season", TRIPLE_DOUBLE_SEASON_PATTERN, _build_triple_double_season),
    ("yearly_leaders", YEARLY_LEADERS_PATTERN, _build_yearly_leaders),
]


def classify_topic(topic: str, this_year: Optional[int] = None) -> QueryIntent:
    """
    Classify a topic string into a QueryIntent.

    Deterministic for a given topic and year, and never fails: unmatched
    input resolves to GENERIC.

    Args:
        topic: Free-text quiz topic
        this_year: Override for the current year (defaults to today's)

    Returns:
        QueryIntent for the topic
    """
    topic = topic or ""
    this_year = this_year or current_year()

    for name, pattern, builder in RULES:
        match = pattern.search(topic)
        if match:
            intent = builder(match, topic, this_year)
            logger.debug(f"Topic matched rule '{name}': {intent}")
            return intent

    intent = QueryIntent(
        stat_category=StatCategory.GENERIC,
        year_range=extract_years(topic, this_year),
        limit=estimate_response_size(topic),
        team_filter=extract_team(topic),
        rule="generic",
        defaulted=True,
    )
    logger.info(f"Classification defaulted to GENERIC for topic: {topic[:100]}")
    return intent


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Classify a quiz topic")
    parser.add_argument("topic", help="Quiz topic to classify")
    args = parser.parse_args()

    result = classify_topic(args.topic)
    print(f"Category:  {result.stat_category.value}")
    print(f"Years:     {result.year_range.start}-{result.year_range.end}")
    print(f"Limit:     {result.limit}")
    print(f"Team:      {result.team_filter}")
    print(f"Threshold: {result.threshold}")
    print(f"Rule:      {result.rule}")
