"""
Structured output extraction for generated quiz JSON.

LLM output is free text that usually, but not always, contains the JSON
object we asked for. The extractor:

1. Locates the candidate JSON (fenced code block, else first '{' to last '}')
2. Parses it, and on failure runs a fixed chain of repairs, re-parsing
   after every stage and stopping at the first success
3. Validates the parsed value into a quiz payload with documented defaults

Every repair only rewrites text outside double-quoted string literals, so
running the chain over valid JSON never changes what it parses to.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from sickohoops.errors import ExtractionFailedError, ValidationFailedError

logger = logging.getLogger(__name__)


CODE_BLOCK_PATTERN = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*```", re.DOTALL)

# Keys accepted for the answer list, first present wins
ANSWER_KEYS = ("answers", "questions", "items")

DEFAULT_TITLE = ""
DEFAULT_DESCRIPTION = ""


@dataclass
class ExtractionResult:
    """Outcome of extracting a quiz payload from generated text."""
    ok: bool
    payload: Optional[dict] = None
    repairs_applied: list[str] = field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[str] = None

    def raise_for_failure(self):
        """Raise the matching QuizGenerationError if extraction failed."""
        if self.ok:
            return
        if self.error_code == ValidationFailedError.code:
            raise ValidationFailedError(self.error)
        raise ExtractionFailedError(self.error)


# =============================================================================
# Locating JSON
# =============================================================================

def locate_json(text: str) -> str:
    """
    Find the JSON candidate inside generated text.

    Prefers a fenced code block. Otherwise takes the span from the first
    '{' to the last '}'. That span is not brace-depth aware, so prose
    containing braces after the object can be swept into the candidate.
    """
    if not text:
        return ""

    block = CODE_BLOCK_PATTERN.search(text)
    if block and block.group(1).strip():
        return block.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1].strip()

    return text.strip()


# =============================================================================
# Repairs
# =============================================================================

def _split_strings(text: str) -> list[tuple[bool, str]]:
    """
    Split text into (is_string, segment) pieces.

    String segments are complete double-quoted literals including quotes
    and escapes; an unterminated literal runs to the end of the text.
    """
    segments = []
    buffer = []
    i = 0
    n = len(text)

    while i < n:
        char = text[i]
        if char != '"':
            buffer.append(char)
            i += 1
            continue

        if buffer:
            segments.append((False, "".join(buffer)))
            buffer = []

        j = i + 1
        while j < n:
            if text[j] == "\\":
                j += 2
                continue
            if text[j] == '"':
                break
            j += 1
        segments.append((True, text[i:j + 1]))
        i = j + 1

    if buffer:
        segments.append((False, "".join(buffer)))

    return segments


def _sub_outside_strings(text: str, pattern: re.Pattern, replacement) -> str:
    """
    Regex substitution restricted to text outside string literals.

    Non-string segments are joined with a private sentinel standing in for
    each literal, so patterns can see across a string (e.g. a trailing comma
    after a quoted value) without ever matching inside one.
    """
    segments = _split_strings(text)
    sentinel = "\x00"
    skeleton = "".join(sentinel if is_string else segment for is_string, segment in segments)
    literals = iter(segment for is_string, segment in segments if is_string)

    rewritten = pattern.sub(replacement, skeleton)
    return "".join(next(literals) if char == sentinel else char for char in rewritten)


TRAILING_COMMA_PATTERN = re.compile(r",\s*([}\]])")
BARE_KEY_PATTERN = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*|\d+)(\s*:)")
BARE_VALUE_PATTERN = re.compile(
    r"(:\s*)(?!(?:true|false|null)\s*[,}\]])([A-Za-z][A-Za-z0-9_ .'\-]*?)(?=\s*[,}\]])"
)
SHORTHAND_TOKEN_PATTERN = re.compile(
    r"([:\[,]\s*)(\d{4}-(?:[A-Za-z]{2,4}|\d{2}(?:\d{2})?))(?=\s*[,}\]])"
)


def strip_trailing_commas(text: str) -> str:
    """Remove commas directly before ']' or '}'."""
    return _sub_outside_strings(text, TRAILING_COMMA_PATTERN, r"\1")


def quote_bare_keys(text: str) -> str:
    """{player: ...} -> {"player": ...}"""
    return _sub_outside_strings(text, BARE_KEY_PATTERN, r'\1"\2"\3')


SINGLE_QUOTE_OPENERS = "{[,:"
SINGLE_QUOTE_CLOSERS = ",}]:"


def _opens_literal(text: str, i: int) -> bool:
    before = text[:i].rstrip()
    return not before or before[-1] in SINGLE_QUOTE_OPENERS


def _closes_literal(text: str, j: int) -> bool:
    after = text[j + 1:].lstrip()
    return not after or after[0] in SINGLE_QUOTE_CLOSERS


def normalize_single_quotes(text: str) -> str:
    """
    Turn 'single quoted' literals into "double quoted" ones.

    A quote only opens a literal where a value or key can start (after
    '{', '[', ',' or ':') and only closes it before ',', '}', ']', ':' or
    the end of text, so apostrophes in names like O'Neal are left alone.
    Double-quoted literals are copied as-is; double quotes inside a single
    quoted literal are escaped.
    """
    out = []
    i = 0
    n = len(text)

    while i < n:
        char = text[i]

        if char == '"':
            j = i + 1
            while j < n and text[j] != '"':
                j += 2 if text[j] == "\\" else 1
            out.append(text[i:j + 1])
            i = j + 1
            continue

        if char != "'" or not _opens_literal(text, i):
            out.append(char)
            i += 1
            continue

        j = i + 1
        chars = []
        while j < n and not (text[j] == "'" and _closes_literal(text, j)):
            if text[j] == "\\" and j + 1 < n:
                # \' is not a JSON escape
                chars.append("'" if text[j + 1] == "'" else text[j:j + 2])
                j += 2
                continue
            chars.append('\\"' if text[j] == '"' else text[j])
            j += 1
        out.append('"' + "".join(chars) + '"')
        i = j + 1

    return "".join(out)


def quote_bare_values(text: str) -> str:
    """Quote bare word values: player: LeBron James becomes "LeBron James"."""
    def _quote(match: re.Match) -> str:
        return f'{match.group(1)}"{match.group(2).strip()}"'
    return _sub_outside_strings(text, BARE_VALUE_PATTERN, _quote)


def quote_shorthand_tokens(text: str) -> str:
    """Quote bare 2018-GSW team tokens and 2022-23 season tokens."""
    return _sub_outside_strings(text, SHORTHAND_TOKEN_PATTERN, r'\1"\2"')


# Fixed order; the chain never retries beyond these stages
REPAIRS: list[tuple[str, Callable[[str], str]]] = [
    ("trailing_commas", strip_trailing_commas),
    ("bare_keys", quote_bare_keys),
    ("single_quotes", normalize_single_quotes),
    ("bare_values", quote_bare_values),
    ("shorthand_tokens", quote_shorthand_tokens),
]


def repair_json(text: str) -> str:
    """Run every repair stage over text, in order."""
    for _, repair in REPAIRS:
        text = repair(text)
    return text


# =============================================================================
# Validation
# =============================================================================

def validate_payload(data: Any) -> dict:
    """
    Shape a parsed value into {title, description, answers, timeLimit?}.

    Missing title/description default to empty strings and missing answers
    to an empty list. A bare list is taken as the answer list.

    Raises:
        ValidationFailedError: if the value is not an object or list, or
            answers is present but not a list
    """
    if isinstance(data, list):
        data = {"answers": data}

    if not isinstance(data, dict):
        raise ValidationFailedError(
            f"Expected a JSON object, got {type(data).__name__}"
        )

    answers = []
    for key in ANSWER_KEYS:
        if key in data and data[key] is not None:
            answers = data[key]
            break

    if not isinstance(answers, list):
        raise ValidationFailedError(
            f"'answers' must be an array, got {type(answers).__name__}"
        )

    title = data.get("title")
    description = data.get("description")

    payload = {
        "title": title if isinstance(title, str) else (DEFAULT_TITLE if title is None else str(title)),
        "description": (
            description if isinstance(description, str)
            else (DEFAULT_DESCRIPTION if description is None else str(description))
        ),
        "answers": answers,
    }

    time_limit = data.get("timeLimit")
    if isinstance(time_limit, (int, float)) and not isinstance(time_limit, bool) and time_limit > 0:
        payload["timeLimit"] = int(time_limit)

    return payload


# =============================================================================
# Extractor
# =============================================================================

class StructuredOutputExtractor:
    """
    Extracts a validated quiz payload from generated text.

    Example:
        >>> result = StructuredOutputExtractor().extract(llm_text)
        >>> if result.ok:
        ...     answers = result.payload["answers"]
    """

    def __init__(self, repairs: Optional[list[tuple[str, Callable[[str], str]]]] = None):
        self.repairs = repairs if repairs is not None else REPAIRS

    def parse(self, text: str) -> tuple[Any, list[str]]:
        """
        Parse the JSON in text, repairing as needed.

        Returns:
            (parsed value, names of the repair stages applied)

        Raises:
            ExtractionFailedError: if no stage of the chain yields valid JSON
        """
        candidate = locate_json(text)
        if not candidate:
            raise ExtractionFailedError("No JSON content found in generated text")

        try:
            return json.loads(candidate), []
        except json.JSONDecodeError as e:
            last_error = e

        applied = []
        for name, repair in self.repairs:
            candidate = repair(candidate)
            applied.append(name)
            try:
                parsed = json.loads(candidate)
                logger.debug(f"JSON parsed after repairs: {applied}")
                return parsed, applied
            except json.JSONDecodeError as e:
                last_error = e

        raise ExtractionFailedError(
            f"JSON still invalid after {len(applied)} repairs: {last_error}"
        )

    def extract(self, text: str) -> ExtractionResult:
        """Locate, repair, parse and validate a quiz payload."""
        try:
            parsed, applied = self.parse(text)
        except ExtractionFailedError as e:
            logger.warning(f"Extraction failed: {e}")
            return ExtractionResult(
                ok=False,
                error=str(e),
                error_code=ExtractionFailedError.code,
            )

        try:
            payload = validate_payload(parsed)
        except ValidationFailedError as e:
            logger.warning(f"Extracted JSON failed validation: {e}")
            return ExtractionResult(
                ok=False,
                repairs_applied=applied,
                error=str(e),
                error_code=ValidationFailedError.code,
            )

        return ExtractionResult(ok=True, payload=payload, repairs_applied=applied)


if __name__ == "__main__":
    import sys

    raw = sys.stdin.read()
    result = StructuredOutputExtractor().extract(raw)
    if result.ok:
        print(json.dumps(result.payload, indent=2))
        if result.repairs_applied:
            print(f"\n[repairs: {', '.join(result.repairs_applied)}]")
    else:
        print(f"Extraction failed ({result.error_code}): {result.error}")
        sys.exit(1)
