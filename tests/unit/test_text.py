"""Tests for text normalization and weekday tokens."""

import pytest

from gymbuddy.core.intelligence.slots.types import Weekday
from gymbuddy.core.intelligence.text import (
    DAY_PATTERN,
    WEEKEND,
    WORKDAYS,
    find_day_tokens,
    normalize_text,
)


class TestNormalizeText:
    """Test normalize_text()."""

    def test_lowercases_and_collapses_whitespace(self):
        assert normalize_text("  Show   MY\tAvailability \n") == "show my availability"

    def test_folds_typographic_apostrophe(self):
        assert normalize_text("What’s my availability") == "what's my availability"

    def test_folds_dashes(self):
        assert normalize_text("Monday 9–11am") == "monday 9-11am"
        assert normalize_text("Monday 9—11am") == "monday 9-11am"

    def test_folds_meridiem_dots(self):
        assert normalize_text("Monday 6-8 p.m.") == "monday 6-8 pm"
        assert normalize_text("9 A.M. to 11 A.M.") == "9 am to 11 am"

    @pytest.mark.parametrize("value", [None, 42, ["monday"], b"monday"])
    def test_non_string_yields_empty(self, value):
        assert normalize_text(value) == ""

    def test_empty_string(self):
        assert normalize_text("   ") == ""


class TestDayTokens:
    """Test weekday tokenization."""

    def test_full_names_and_abbreviations(self):
        tokens = find_day_tokens("mon, tues and thurs")

        assert [t.days for t in tokens] == [
            (Weekday.MONDAY,),
            (Weekday.TUESDAY,),
            (Weekday.THURSDAY,),
        ]

    def test_plural_preferred_over_abbreviation(self):
        tokens = find_day_tokens("mondays")

        assert len(tokens) == 1
        assert tokens[0].token == "mondays"

    def test_group_tokens_expand(self):
        tokens = find_day_tokens("weekdays and weekends")

        assert tokens[0].days == WORKDAYS
        assert tokens[1].days == WEEKEND
        assert tokens[0].is_group

    def test_every_day_expands_to_all(self):
        tokens = find_day_tokens("every day 6-7")

        assert tokens[0].days == tuple(Weekday)

    def test_word_boundaries(self):
        assert find_day_tokens("sunny weather, monster workout") == []

    def test_spans_point_into_text(self):
        text = "free on friday 6-8pm"
        token = find_day_tokens(text)[0]

        assert text[token.start:token.end] == "friday"

    def test_day_pattern_matches_abbreviation(self):
        assert DAY_PATTERN.search("wed 6-8") is not None
