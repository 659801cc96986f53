"""
Answer data model for SickoHoops quizzes.

AnswerRecord is one row of a quiz (a player, a season, a team and an
optional stat value). AnswerSet is the ordered, immutable collection a
QuizSession is played against. QuizPayload is what the resolver hands back
and what the API serialises.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional, Union

from sickohoops.errors import ValidationFailedError
from sickohoops.intent.classifier import team_code_for


TEAM_PLACEHOLDER = "NBA"

# Team values that mean "we don't know"; replaced by the NBA placeholder
UNKNOWN_TEAMS = {"", "n/a", "na", "none", "null", "unknown", "unavailable", "tbd", "-"}

TEAM_CODE_PATTERN = re.compile(r"^(\d{4})-([A-Za-z]{3})$")
TEAM_YEAR_PATTERN = re.compile(r"^(\d{4})-")
BARE_TEAM_PATTERN = re.compile(r"^[A-Za-z]{3}$")

# Common non-standard abbreviations -> team code
TEAM_ALIASES = {
    "GS": "GSW", "NY": "NYK", "SA": "SAS", "NO": "NOP", "NOR": "NOP",
    "PHO": "PHX", "BRK": "BKN", "BKLYN": "BKN", "CHO": "CHA", "WSH": "WAS",
    "UTAH": "UTA", "NJ": "NJN",
}
SEASON_PATTERN = re.compile(r"^(\d{4})\s*[-/–]\s*(\d{2}|\d{4})$")
YEAR_PATTERN = re.compile(r"^\d{4}$")

Number = Union[int, float]


def coerce_stat(value: Any) -> Number:
    """Stat values are numbers; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip().rstrip("+"))
        except ValueError:
            return 0
    if number != number:  # NaN
        return 0
    return int(number) if number.is_integer() else number


def season_end_year(value: Any) -> Optional[str]:
    """
    Convert a year or season to the season-end-year convention.

    2023, "2023" and "2022-23" all become "2023".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()

    if YEAR_PATTERN.match(text):
        return text

    season = SEASON_PATTERN.match(text)
    if season:
        start, end = season.groups()
        if len(end) == 4:
            return end
        # "1999-00" ends in 2000
        return str(int(start[:2] + end) + (100 if end < start[2:] else 0))

    return None


@dataclass(frozen=True)
class AnswerRecord:
    """One quiz answer: a player in a season, with an optional stat value."""
    player: str
    team: str
    year: str
    stat_value: Number = 0

    def __post_init__(self):
        if not self.player or not self.player.strip():
            raise ValidationFailedError("Answer record has an empty player name")
        if not YEAR_PATTERN.match(self.year):
            raise ValidationFailedError(f"Answer record year is not 4 digits: {self.year!r}")

    @property
    def season_year(self) -> int:
        return int(self.year)

    @property
    def team_code(self) -> str:
        """The TTT part of YYYY-TTT."""
        return self.team.split("-", 1)[-1]

    def to_dict(self) -> dict:
        return {
            "points": self.stat_value,
            "player": self.player,
            "team": self.team,
            "year": self.year,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AnswerRecord":
        """
        Build a record from loosely-typed data (typically generated JSON).

        Raises:
            ValidationFailedError: if there is no player name or no year
                can be derived from the year or team fields
        """
        if not isinstance(data, dict):
            raise ValidationFailedError(f"Answer record is not an object: {data!r}")

        player = data.get("player") or data.get("name") or ""
        if not isinstance(player, str):
            player = str(player)
        player = " ".join(player.split())

        raw_team = data.get("team")
        raw_team = "" if raw_team is None else str(raw_team).strip()

        year = season_end_year(data.get("year"))
        team_match = TEAM_YEAR_PATTERN.match(raw_team)
        if year is None and team_match:
            year = team_match.group(1)
        if year is None:
            raise ValidationFailedError(f"Answer record for {player!r} has no usable year")

        return cls(
            player=player,
            team=normalize_team(raw_team, year),
            year=year,
            stat_value=coerce_stat(data.get("points", data.get("stat_value"))),
        )


def normalize_team(raw_team: str, year: str) -> str:
    """
    Force a team value into the YYYY-TTT convention.

    TTT is a 3-letter code. Known aliases ("GS", "PHO") and franchise names
    ("Golden State Warriors") are mapped to their code; anything else gets
    the NBA placeholder.
    """
    team = (raw_team or "").strip()

    match = TEAM_CODE_PATTERN.match(team)
    if match:
        code = match.group(2).upper()
        return f"{match.group(1)}-{TEAM_ALIASES.get(code, code)}"

    # "YYYY-N/A" and friends
    if "-" in team and team.split("-", 1)[0].isdigit():
        team = team.split("-", 1)[1].strip()

    if team.lower() in UNKNOWN_TEAMS:
        return f"{year}-{TEAM_PLACEHOLDER}"

    code = TEAM_ALIASES.get(team.upper())
    if code is None and BARE_TEAM_PATTERN.match(team):
        code = team.upper()
    if code is None:
        code = team_code_for(team)

    return f"{year}-{code or TEAM_PLACEHOLDER}"


class AnswerSet:
    """
    Immutable answers ordered by descending season year.

    Ties keep their input order. Build with from_records; the ordering is
    recomputed from content every time a set is created.
    """

    __slots__ = ("_records",)

    def __init__(self, records: tuple = ()):
        self._records = tuple(records)

    @classmethod
    def from_records(cls, records: Iterable[AnswerRecord]) -> "AnswerSet":
        return cls(tuple(sorted(records, key=lambda r: r.season_year, reverse=True)))

    @classmethod
    def from_dicts(cls, rows: Iterable[dict]) -> "AnswerSet":
        return cls.from_records(AnswerRecord.from_dict(row) for row in rows)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AnswerRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> AnswerRecord:
        return self._records[index]

    def __bool__(self) -> bool:
        return bool(self._records)

    def __eq__(self, other) -> bool:
        return isinstance(other, AnswerSet) and self._records == other._records

    def __hash__(self) -> int:
        return hash(self._records)

    def __repr__(self) -> str:
        return f"AnswerSet({len(self._records)} records)"

    @property
    def records(self) -> tuple:
        return self._records

    def to_list(self) -> list[dict]:
        return [record.to_dict() for record in self._records]


@dataclass(frozen=True)
class QuizPayload:
    """A resolved quiz, ready to play or serialise."""
    title: str
    description: str
    answers: AnswerSet
    time_limit: int
    source: str = field(default="", compare=False)

    def to_dict(self) -> dict:
        """Success response body."""
        return {
            "title": self.title,
            "description": self.description,
            "answers": self.answers.to_list(),
            "timeLimit": self.time_limit,
        }
