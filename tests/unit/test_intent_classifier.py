"""Tests for rule-based intent classification."""

import pytest

from gymbuddy.core.intelligence.intent.classifier import IntentClassifier, classify_intent
from gymbuddy.core.intelligence.intent.rules import DEFAULT_RULES, QUERY_PHRASES, IntentRule
from gymbuddy.core.intelligence.intent.types import Confidence, Intent, IntentResult
from gymbuddy.core.intelligence.slots.types import AvailabilityContext, TimeSlot, Weekday

CANONICAL_QUERIES = [
    "what's my availability",
    "whats my availability",
    "show my availability",
    "my schedule",
    "when am i available",
    "what's my schedule",
    "check my availability",
    "view my availability",
    "see my availability",
    "exact dates",
    "exact times",
    "exact dates and times",
    "when am i free",
    "my available times",
    "available this week",
    "list my availability",
    "display my schedule",
]


@pytest.fixture
def classifier():
    return IntentClassifier()


@pytest.fixture
def context():
    return [TimeSlot(day=Weekday.MONDAY, start_hour=9, end_hour=11)]


class TestQueryIntent:
    """Availability questions."""

    @pytest.mark.parametrize("text", CANONICAL_QUERIES)
    def test_canonical_phrases_are_high_confidence_queries(self, classifier, text):
        result = classifier.classify(text)

        assert result.intent == Intent.AVAILABILITY_QUERY
        assert result.confidence == Confidence.HIGH

    @pytest.mark.parametrize("text", CANONICAL_QUERIES)
    def test_canonical_phrases_match_with_context(self, classifier, context, text):
        assert classifier.classify(text, context).intent == Intent.AVAILABILITY_QUERY

    def test_case_and_whitespace_insensitive(self, classifier):
        result = classifier.classify("  WHAT'S   my  Availability ")

        assert result.intent == Intent.AVAILABILITY_QUERY

    def test_phrase_as_substring(self, classifier):
        result = classifier.classify("hey buddy, i need the exact dates and times please")

        assert result.intent == Intent.AVAILABILITY_QUERY
        assert result.evidence == "exact dates and times"

    def test_question_with_day_is_not_update(self, classifier):
        result = classifier.classify("what's my schedule on monday?")

        assert result.intent == Intent.AVAILABILITY_QUERY

    def test_canonical_list_is_covered(self):
        assert set(CANONICAL_QUERIES) <= set(QUERY_PHRASES)

    @pytest.mark.parametrize(
        "text",
        [
            "please show my availability for tuesday evening",
            "can you check my availability on friday morning",
            "i'd like to see my availability for monday 6-9",
            "could you list my availability on weekends",
        ],
    )
    def test_query_phrase_with_day_is_not_update(self, classifier, context, text):
        result = classifier.classify(text, context)

        assert result.intent == Intent.AVAILABILITY_QUERY
        assert result.rule == "query_phrase"

    @pytest.mark.parametrize(
        "text",
        ["update my schedule to monday 6-9", "I'm free this week on monday 6-8pm"],
    )
    def test_update_phrasing_around_query_words_still_updates(self, classifier, text):
        assert classifier.classify(text).intent == Intent.AVAILABILITY_UPDATE


class TestDeletionIntent:
    """Deletion group, evaluated first."""

    @pytest.mark.parametrize(
        "text",
        [
            "clear my availability",
            "delete my schedule",
            "remove my Monday slot",
            "cancel my session",
            "reset my availability",
        ],
    )
    def test_verb_with_scope_noun(self, classifier, context, text):
        result = classifier.classify(text, context)

        assert result.intent == Intent.AVAILABILITY_DELETION
        assert result.confidence == Confidence.HIGH
        assert result.rule == "deletion_scope"

    def test_verb_with_scope_noun_without_context(self, classifier):
        assert classifier.classify("clear my availability").intent == Intent.AVAILABILITY_DELETION

    @pytest.mark.parametrize("text", ["clear this", "delete it", "remove that", "cancel all"])
    def test_contextual_pronoun_with_context(self, classifier, context, text):
        result = classifier.classify(text, context)

        assert result.intent == Intent.AVAILABILITY_DELETION
        assert result.rule == "deletion_contextual"

    @pytest.mark.parametrize("text", ["clear this", "delete it", "remove that", "clear everything"])
    def test_contextual_pronoun_without_context_is_not_deletion(self, classifier, text):
        assert classifier.classify(text).intent != Intent.AVAILABILITY_DELETION
        assert classifier.classify(text, []).intent != Intent.AVAILABILITY_DELETION
        assert classifier.classify(text, AvailabilityContext()).intent != Intent.AVAILABILITY_DELETION

    def test_clear_this_without_context_falls_back(self, classifier):
        result = classifier.classify("clear this")

        assert result.intent == Intent.GENERAL_CHAT
        assert result.confidence == Confidence.LOW

    @pytest.mark.parametrize(
        "text",
        [
            "I'm free Monday but remove my Tuesday slot",
            "delete my availability for monday 6-8pm",
            "remove monday 9-11am",
            "update my schedule: delete tuesday",
        ],
    )
    def test_deletion_wins_over_update(self, classifier, text):
        assert classifier.classify(text).intent == Intent.AVAILABILITY_DELETION

    def test_not_available_is_deletion(self, classifier):
        result = classifier.classify("I'm not available on Wednesdays anymore")

        assert result.intent == Intent.AVAILABILITY_DELETION
        assert result.rule == "deletion_not_available"

    @pytest.mark.parametrize(
        "text",
        ["clear all my availability", "delete my entire schedule", "reset my schedule"],
    )
    def test_full_clear_flag(self, classifier, text):
        result = classifier.classify(text)

        assert result.intent == Intent.AVAILABILITY_DELETION
        assert result.full_clear is True

    def test_targeted_deletion_is_not_full_clear(self, classifier):
        assert classifier.classify("remove my Monday slot").full_clear is False

    def test_evidence_names_both_parts(self, classifier):
        result = classifier.classify("please clear my availability")

        assert result.evidence == "clear + availability"


class TestUpdateIntent:
    """Availability updates."""

    @pytest.mark.parametrize(
        "text",
        [
            "I'm free Monday 9-11am",
            "I am available on weekends",
            "set me available friday evening",
            "update my availability",
            "free on tuesday after work",
        ],
    )
    def test_explicit_update_is_high(self, classifier, text):
        result = classifier.classify(text)

        assert result.intent == Intent.AVAILABILITY_UPDATE
        assert result.confidence == Confidence.HIGH

    def test_noun_with_daypart_is_high(self, classifier):
        result = classifier.classify("my availability is thursday mornings")

        assert result.intent == Intent.AVAILABILITY_UPDATE
        assert result.confidence == Confidence.HIGH

    def test_day_with_time_is_medium(self, classifier):
        result = classifier.classify("Monday 9-11am and Wednesday 6-8pm")

        assert result.intent == Intent.AVAILABILITY_UPDATE
        assert result.confidence == Confidence.MEDIUM
        assert result.rule == "update_day_with_time"

    def test_bare_day_is_medium(self, classifier):
        result = classifier.classify("saturday")

        assert result.intent == Intent.AVAILABILITY_UPDATE
        assert result.confidence == Confidence.MEDIUM
        assert result.rule == "update_bare_day"

    def test_bare_range_is_medium(self, classifier):
        result = classifier.classify("6-9 works")

        assert result.intent == Intent.AVAILABILITY_UPDATE
        assert result.confidence == Confidence.MEDIUM


class TestSessionCancellation:
    """Cancelling booked sessions rather than availability."""

    @pytest.mark.parametrize(
        "text",
        [
            "cancel our workout",
            "call off the gym tomorrow",
            "cancel my booking",
            "skip tomorrow's workout",
            "cancel monday's workout",
        ],
    )
    def test_cancel_booking_noun(self, classifier, text):
        result = classifier.classify(text)

        assert result.intent == Intent.SESSION_CANCELLATION
        assert result.confidence == Confidence.HIGH

    def test_cant_make_it_is_medium(self, classifier):
        result = classifier.classify("sorry I can't make it today")

        assert result.intent == Intent.SESSION_CANCELLATION
        assert result.confidence == Confidence.MEDIUM

    @pytest.mark.parametrize(
        "text",
        ["cancel all our workouts this week", "I can't make it, cancel it", "cancel that workout"],
    )
    def test_contextual_cancel_of_booking_is_not_deletion(self, classifier, context, text):
        result = classifier.classify(text, context)

        assert result.intent == Intent.SESSION_CANCELLATION
        assert result.rule != "deletion_contextual"


class TestFallback:
    """No-match default."""

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "!!!", "???", "...", "12345", "hey how's it going", "I need some motivation"],
    )
    def test_unmatched_text_is_low_general_chat(self, classifier, text):
        result = classifier.classify(text)

        assert result.intent == Intent.GENERAL_CHAT
        assert result.confidence == Confidence.LOW
        assert result.evidence is None
        assert result.is_fallback

    @pytest.mark.parametrize("value", [None, 42, 3.5, ["clear", "all"], {"text": "hi"}, object()])
    def test_non_text_input_never_raises(self, classifier, value):
        result = classifier.classify(value)

        assert isinstance(result, IntentResult)
        assert result.intent == Intent.GENERAL_CHAT

    def test_odd_context_never_raises(self, classifier):
        result = classifier.classify("clear this", context=object())

        assert result.intent == Intent.GENERAL_CHAT

    def test_low_confidence_only_for_default(self, classifier, context):
        samples = CANONICAL_QUERIES + [
            "clear my availability",
            "Monday 9-11am",
            "cancel our workout",
            "saturday",
        ]
        for text in samples:
            result = classifier.classify(text, context)
            assert (result.confidence == Confidence.LOW) == result.is_fallback
            assert result.allows_automatic_action

    def test_fallback_is_logged(self, classifier, caplog):
        with caplog.at_level("INFO"):
            classifier.classify("tell me a joke")

        assert "falling back to general chat" in caplog.text


class TestDeterminism:
    """Pure function of (text, context)."""

    def test_same_input_same_output(self, classifier, context):
        text = "remove my Monday slot"

        assert classifier.classify(text, context) == classifier.classify(text, context)

    def test_convenience_function_matches_instance(self, classifier):
        assert classify_intent("show my availability") == classifier.classify("show my availability")


class TestRules:
    """Rule table and per-rule matching."""

    def test_groups_are_ordered(self):
        order = [rule.intent for rule in DEFAULT_RULES]
        first_index = {intent: order.index(intent) for intent in set(order)}

        assert (
            first_index[Intent.AVAILABILITY_DELETION]
            < first_index[Intent.AVAILABILITY_UPDATE]
            < first_index[Intent.AVAILABILITY_QUERY]
            < first_index[Intent.SESSION_CANCELLATION]
        )

    def test_rule_names_unique(self):
        names = [rule.name for rule in DEFAULT_RULES]

        assert len(names) == len(set(names))

    def test_no_rule_emits_general_chat_or_low(self):
        for rule in DEFAULT_RULES:
            assert rule.intent != Intent.GENERAL_CHAT
            assert rule.confidence != Confidence.LOW

    def test_rule_match_in_isolation(self):
        rule = next(r for r in DEFAULT_RULES if r.name == "deletion_contextual")

        assert rule.match("clear this", has_context=True) == "clear this"
        assert rule.match("clear this", has_context=False) is None

    def test_custom_rule_table(self):
        import re

        rules = [
            IntentRule(
                name="only_queries",
                intent=Intent.AVAILABILITY_QUERY,
                confidence=Confidence.HIGH,
                patterns=(re.compile(r"\bschedule\b"),),
            )
        ]
        classifier = IntentClassifier(rules=rules)

        assert classifier.classify("clear my schedule").rule == "only_queries"
        assert classifier.classify("clear my availability").is_fallback


class TestIntentResult:
    """IntentResult dataclass."""

    def test_to_dict(self):
        result = IntentResult(
            intent=Intent.AVAILABILITY_DELETION,
            confidence=Confidence.HIGH,
            evidence="clear + availability",
            rule="deletion_scope",
            full_clear=False,
        )

        assert result.to_dict() == {
            "intent": "availability_deletion",
            "confidence": "high",
            "evidence": "clear + availability",
            "rule": "deletion_scope",
            "full_clear": False,
        }

    def test_is_availability_related(self):
        assert IntentResult(Intent.AVAILABILITY_QUERY, Confidence.HIGH, rule="x").is_availability_related
        assert not IntentResult(Intent.SESSION_CANCELLATION, Confidence.HIGH, rule="x").is_availability_related
