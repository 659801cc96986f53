"""
Answer matching for quiz sessions.

A typed guess matches a record on the player's full name, last name, or
first name when no other record in the quiz shares that first name. Every
unmatched record a guess hits is found in the same step, so "curry" finds
every Stephen Curry season at once.
"""

import unicodedata
from dataclasses import dataclass
from typing import Iterable

from sickohoops.quiz.models import AnswerSet


def normalize(text: str) -> str:
    """
    Case-fold and strip a name for comparison.

    Lowercases, decomposes accents and drops them, removes punctuation and
    collapses whitespace. normalize("José  O'Neal") == "jose oneal".
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    kept = (
        char for char in decomposed
        if not unicodedata.combining(char) and not unicodedata.category(char).startswith("P")
    )
    return " ".join("".join(kept).split())


@dataclass(frozen=True)
class MatchState:
    """Indices of found answers. Only ever grows."""
    indices: frozenset = frozenset()

    def with_indices(self, new: Iterable[int]) -> "MatchState":
        new = frozenset(new)
        if new <= self.indices:
            return self
        return MatchState(self.indices | new)

    def __contains__(self, index: int) -> bool:
        return index in self.indices

    def __len__(self) -> int:
        return len(self.indices)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one guess."""
    state: MatchState
    matched: tuple
    changed: bool
    input_text: str
    complete: bool


class MatchingEngine:
    """
    Matches guesses against a fixed AnswerSet.

    Name keys are normalized once up front; match() itself never mutates
    anything and returns a new MatchState.

    Example:
        >>> engine = MatchingEngine(answers)
        >>> result = engine.match(MatchState(), "Jokic")
        >>> result.matched
        (0,)
    """

    def __init__(self, answer_set: AnswerSet):
        self.answer_set = answer_set
        self._full = []
        self._first = []
        self._last = []
        first_counts: dict[str, int] = {}

        for record in answer_set:
            full = normalize(record.player)
            tokens = record.player.split()
            first = normalize(tokens[0]) if tokens else ""
            last = normalize(tokens[-1]) if tokens else ""
            self._full.append(full)
            self._first.append(first)
            self._last.append(last)
            first_counts[first] = first_counts.get(first, 0) + 1

        self._first_counts = first_counts

    def _matches(self, index: int, guess: str) -> bool:
        if guess == self._full[index] or guess == self._last[index]:
            return True
        # First names only count when no other record shares them
        return guess == self._first[index] and self._first_counts[guess] == 1

    def match(self, state: MatchState, text: str) -> MatchResult:
        """
        Apply one guess.

        On a match the returned input_text is cleared; otherwise the raw
        text is handed back so the caller can keep showing it.
        """
        guess = normalize(text)
        hits = ()
        if guess:
            hits = tuple(
                i for i in range(len(self.answer_set))
                if i not in state and self._matches(i, guess)
            )

        new_state = state.with_indices(hits)
        return MatchResult(
            state=new_state,
            matched=hits,
            changed=bool(hits),
            input_text="" if hits else text,
            complete=self.is_complete(new_state),
        )

    def is_complete(self, state: MatchState) -> bool:
        return len(state) == len(self.answer_set)
