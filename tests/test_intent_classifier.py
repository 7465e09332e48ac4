"""Unit tests for the ordered keyword intent classifier."""

from __future__ import annotations

import pytest

from agribot.config.settings import MATCH_CONFIDENCE
from agribot.errors import UnknownIntentError
from agribot.services.intent_classifier import (
    Intent,
    IntentResult,
    KeywordIntentClassifier,
    classify_intent,
    detect_intent,
)


class TestKeywordIntentClassifier:
    """Intent classification for typical farmer questions."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("My tomato plants look sick", Intent.DISEASE_DETECTION),
            ("How often should I water the field?", Intent.IRRIGATION_ADVICE),
            ("Is drip irrigation worth it?", Intent.IRRIGATION_ADVICE),
            ("Which nutrients does maize need?", Intent.FERTILIZER_RECOMMENDATION),
            ("Will it rain tomorrow?", Intent.WEATHER_QUERY),
            ("When can I harvest?", Intent.HARVEST_TIMING),
            ("Show me the statistics", Intent.TREND_INQUIRY),
            ("Is there a cure for blight?", Intent.TREATMENT_ADVICE),
            ("What can you do?", Intent.HELP_REQUEST),
            ("tell me a joke", Intent.GENERAL_QUERY),
        ],
    )
    def test_each_rule(self, text: str, expected: Intent) -> None:
        assert detect_intent(text) is expected

    def test_case_insensitive(self) -> None:
        assert detect_intent("I need HELP") is detect_intent("i need help") is Intent.HELP_REQUEST
        assert detect_intent("FERTILIZER") is Intent.FERTILIZER_RECOMMENDATION

    def test_deterministic(self) -> None:
        results = {detect_intent("When is my rice ready?") for _ in range(20)}
        assert results == {Intent.HARVEST_TIMING}

    def test_earlier_rule_wins(self) -> None:
        assert detect_intent("my crop is sick, what's the weather?") is Intent.DISEASE_DETECTION
        # treatment (rule 7) loses to water (rule 2)
        assert detect_intent("treatment for water logging") is Intent.IRRIGATION_ADVICE
        # help (rule 8) loses to everything before it
        assert detect_intent("help me with fertilizer") is Intent.FERTILIZER_RECOMMENDATION

    def test_literal_substring_match(self) -> None:
        # No word boundaries: "grain" contains "rain", "already" contains "ready".
        assert detect_intent("grain prices") is Intent.WEATHER_QUERY
        assert detect_intent("I already sowed") is Intent.HARVEST_TIMING
        assert detect_intent("problems everywhere") is Intent.DISEASE_DETECTION

    def test_empty_returns_general_query(self) -> None:
        classifier = KeywordIntentClassifier()
        r = classifier.classify("")
        assert r.intent is Intent.GENERAL_QUERY
        assert r.confidence == 0.0
        assert classifier.classify("   ").intent is Intent.GENERAL_QUERY

    def test_confidence_and_metadata(self) -> None:
        r = classify_intent("Any rain this week?")
        assert isinstance(r, IntentResult)
        assert r.confidence == MATCH_CONFIDENCE == 0.85
        assert r.matched_keyword == "rain"
        assert not r.is_default
        assert r.metadata() == {"intent": "weather_query", "confidence": 0.85}

        default = classify_intent("hello")
        assert default.is_default
        assert default.matched_keyword is None
        assert default.metadata()["intent"] == "general_query"

    def test_raw_text_preserved(self) -> None:
        text = "  Is my Wheat READY?  "
        assert classify_intent(text).raw_text == text

    def test_multi_word_keyword(self) -> None:
        assert detect_intent("So what can you do for me") is Intent.HELP_REQUEST
        assert detect_intent("what you can do") is Intent.GENERAL_QUERY

    def test_rules_keep_configured_order(self) -> None:
        order = [intent for intent, _ in KeywordIntentClassifier().rules]
        assert order == [
            Intent.DISEASE_DETECTION,
            Intent.IRRIGATION_ADVICE,
            Intent.FERTILIZER_RECOMMENDATION,
            Intent.WEATHER_QUERY,
            Intent.HARVEST_TIMING,
            Intent.TREND_INQUIRY,
            Intent.TREATMENT_ADVICE,
            Intent.HELP_REQUEST,
        ]

    def test_custom_rules(self) -> None:
        classifier = KeywordIntentClassifier(
            rules=[("weather_query", ["Monsoon"]), (Intent.DISEASE_DETECTION, ["monsoon", "fungus"])]
        )
        assert classifier.classify("monsoon fungus").intent is Intent.WEATHER_QUERY
        assert classifier.classify("fungus").intent is Intent.DISEASE_DETECTION
        assert classifier.classify("sick").intent is Intent.GENERAL_QUERY

    def test_custom_rules_unknown_intent(self) -> None:
        with pytest.raises(UnknownIntentError):
            KeywordIntentClassifier(rules=[("pest_control", ["aphid"])])


class TestIntentParse:
    def test_accepts_enum_and_tag(self) -> None:
        assert Intent.parse(Intent.HELP_REQUEST) is Intent.HELP_REQUEST
        assert Intent.parse("trend_inquiry") is Intent.TREND_INQUIRY

    @pytest.mark.parametrize("value", ["TrendInquiry", "", None, 3])
    def test_rejects_unknown(self, value: object) -> None:
        with pytest.raises(UnknownIntentError):
            Intent.parse(value)
