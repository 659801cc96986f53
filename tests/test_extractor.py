"""
Tests for structured output extraction and the JSON repair chain.
"""

import json

import pytest

from sickohoops.errors import ExtractionFailedError, ValidationFailedError
from sickohoops.extraction.extractor import (
    REPAIRS,
    StructuredOutputExtractor,
    locate_json,
    normalize_single_quotes,
    quote_bare_keys,
    quote_bare_values,
    quote_shorthand_tokens,
    repair_json,
    strip_trailing_commas,
    validate_payload,
)


VALID_DOCUMENTS = [
    '{"title": "MVPs", "description": "", "answers": []}',
    '{"title": "a, }", "answers": [{"player": "Shaquille O\'Neal", "team": "2000-LAL", "year": "2000", "points": 29.7}]}',
    '{"note": "key: value, trailing,]", "list": [1, 2, 3], "flag": true, "none": null}',
    '{"player": "Nikola Jokić", "escaped": "say \\"hi\\", ok", "team": "2021-DEN"}',
    '[{"player": "Tim Duncan", "year": "2003"}]',
]


class TestLocateJson:
    """Tests for finding the JSON candidate in generated text."""

    def test_fenced_block(self):
        """A fenced code block is preferred."""
        text = 'Sure!\n```json\n{"a": 1}\n```\nEnjoy.'
        assert locate_json(text) == '{"a": 1}'

    def test_brace_span(self):
        """Without a fence the outermost braces are taken."""
        assert locate_json('Here: {"a": {"b": 2}} done') == '{"a": {"b": 2}}'

    def test_brace_span_is_not_depth_aware(self):
        """Braces in trailing prose are swept into the span."""
        assert locate_json('{"a": 1} and {b}') == '{"a": 1} and {b}'

    def test_plain_text(self):
        """Bare JSON is returned stripped."""
        assert locate_json("  [1, 2]  ") == "[1, 2]"

    def test_empty(self):
        """Empty text gives an empty candidate."""
        assert locate_json("") == ""


class TestRepairs:
    """Each repair stage on its own."""

    def test_trailing_commas(self):
        """Commas before closing brackets are removed."""
        assert json.loads(strip_trailing_commas('{"a": [1, 2,], "b": 3,}')) == {"a": [1, 2], "b": 3}

    def test_bare_keys(self):
        """Bare identifiers before a colon become keys."""
        assert json.loads(quote_bare_keys('{player: "X", year: "2020"}')) == {"player": "X", "year": "2020"}

    def test_single_quotes(self):
        """Single-quoted literals become double-quoted."""
        assert json.loads(normalize_single_quotes("{'player': 'Kobe \"Mamba\" Bryant'}")) == {
            "player": 'Kobe "Mamba" Bryant'
        }

    def test_single_quotes_skip_apostrophes(self):
        """Apostrophes inside names do not open or close literals."""
        repaired = normalize_single_quotes("{'title': 'Shaq', 'player': 'Shaquille O'Neal', 'alt': Jermaine O'Neal}")
        assert repaired == '{"title": "Shaq", "player": "Shaquille O\'Neal", "alt": Jermaine O\'Neal}'

    def test_bare_values(self):
        """Bare words after a colon become strings."""
        repaired = quote_bare_values('{"player": LeBron James, "flag": true, "none": null}')
        assert json.loads(repaired) == {"player": "LeBron James", "flag": True, "none": None}

    def test_shorthand_tokens(self):
        """Season and team tokens are quoted."""
        repaired = quote_shorthand_tokens('{"team": 2018-GSW, "year": 2022-23, "seasons": [2019-20, 2020-21]}')
        assert json.loads(repaired) == {"team": "2018-GSW", "year": "2022-23", "seasons": ["2019-20", "2020-21"]}

    def test_repairs_leave_strings_alone(self):
        """No stage touches text inside string literals."""
        text = '{"note": "a, ] b: c", "x": 1}'
        for _, repair in REPAIRS:
            assert repair(text) == text


class TestRepairIdempotence:
    """Valid JSON goes through every stage unchanged in meaning."""

    @pytest.mark.parametrize("document", VALID_DOCUMENTS)
    def test_each_stage(self, document):
        """Every stage leaves valid JSON meaning unchanged."""
        expected = json.loads(document)
        for name, repair in REPAIRS:
            assert json.loads(repair(document)) == expected, name

    @pytest.mark.parametrize("document", VALID_DOCUMENTS)
    def test_full_chain(self, document):
        """The whole chain leaves valid JSON meaning unchanged."""
        assert json.loads(repair_json(document)) == json.loads(document)


class TestValidatePayload:
    """Post-parse shape checks and defaults."""

    def test_defaults(self):
        """An empty object gets title, description and answers defaults."""
        assert validate_payload({}) == {"title": "", "description": "", "answers": []}

    def test_list_is_answers(self):
        """A top-level list is the answer list."""
        assert validate_payload([{"player": "X"}])["answers"] == [{"player": "X"}]

    def test_answer_aliases(self):
        """Alternate answer keys are accepted."""
        assert validate_payload({"questions": [1]})["answers"] == [1]

    def test_time_limit_kept_when_positive(self):
        """Only a positive timeLimit is kept."""
        assert validate_payload({"timeLimit": 300})["timeLimit"] == 300
        assert "timeLimit" not in validate_payload({"timeLimit": -1})

    def test_answers_not_list(self):
        """A non-list answers value is a validation failure."""
        with pytest.raises(ValidationFailedError):
            validate_payload({"answers": "lots"})

    def test_not_container(self):
        """A scalar document is a validation failure."""
        with pytest.raises(ValidationFailedError):
            validate_payload("just a string")


class TestStructuredOutputExtractor:
    """End-to-end extraction."""

    def test_clean_output(self, generated_quiz):
        """Clean output needs no repairs."""
        result = StructuredOutputExtractor().extract(generated_quiz)
        assert result.ok
        assert result.repairs_applied == []
        assert result.payload["title"] == "NBA MVPs Since 2021"
        assert len(result.payload["answers"]) == 3
        assert result.payload["timeLimit"] == 600

    def test_repaired_output(self):
        """Loosely formatted output is repaired stage by stage."""
        text = """{
            title: 'Splash Brothers',
            answers: [
                {player: Klay Thompson, team: 2018-GSW, year: 2018, points: 13,},
                {player: 'Stephen Curry', team: 2016-GSW, year: 2016, points: 12},
            ],
        }"""
        result = StructuredOutputExtractor().extract(text)
        assert result.ok, result.error
        assert result.payload["title"] == "Splash Brothers"
        assert result.payload["answers"][0] == {
            "player": "Klay Thompson", "team": "2018-GSW", "year": 2018, "points": 13,
        }
        assert result.repairs_applied[0] == "trailing_commas"

    @pytest.mark.parametrize("text", [
        "{title: 'MVPs', description: '', answers: [{player: Shaquille O'Neal, team: 2000-LAL, year: 2000}]}",
        '{"title": "MVPs", "answers": [{"player": Shaquille O\'Neal, "team": "2000-LAL", "year": "2000"}]}',
    ])
    def test_apostrophe_in_bare_name(self, text):
        """A bare name with an apostrophe survives the repair chain."""
        result = StructuredOutputExtractor().extract(text)
        assert result.ok, result.error
        assert result.payload["title"] == "MVPs"
        assert result.payload["answers"][0]["player"] == "Shaquille O'Neal"
        assert result.payload["answers"][0]["team"] == "2000-LAL"

    def test_stops_at_first_success(self):
        """The chain stops once the text parses."""
        result = StructuredOutputExtractor().extract('{"answers": [],}')
        assert result.ok
        assert result.repairs_applied == ["trailing_commas"]

    def test_unrepairable(self):
        """Prose with no JSON fails extraction."""
        result = StructuredOutputExtractor().extract("I couldn't find any data on that, sorry.")
        assert not result.ok
        assert result.error_code == "ExtractionFailed"
        with pytest.raises(ExtractionFailedError):
            result.raise_for_failure()

    def test_validation_failure(self):
        """A wrongly shaped payload fails validation."""
        result = StructuredOutputExtractor().extract('{"answers": {"player": "X"}}')
        assert not result.ok
        assert result.error_code == "ValidationFailed"
        with pytest.raises(ValidationFailedError):
            result.raise_for_failure()
