"""Intent classification using ordered keyword rules.

Lightweight and deterministic: rules come from `INTENT_RULES` in
`agribot.config.settings` and are checked top to bottom. The first rule with
any keyword present in the lower-cased message decides the intent. There is
no scoring, so a message that mentions both a sick crop and the weather is a
disease question.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from agribot.config.settings import DEFAULT_CONFIDENCE, INTENT_RULES, MATCH_CONFIDENCE
from agribot.errors import UnknownIntentError


class Intent(str, Enum):
    DISEASE_DETECTION = "disease_detection"
    IRRIGATION_ADVICE = "irrigation_advice"
    FERTILIZER_RECOMMENDATION = "fertilizer_recommendation"
    WEATHER_QUERY = "weather_query"
    HARVEST_TIMING = "harvest_timing"
    TREND_INQUIRY = "trend_inquiry"
    TREATMENT_ADVICE = "treatment_advice"
    HELP_REQUEST = "help_request"
    GENERAL_QUERY = "general_query"

    @classmethod
    def parse(cls, value: object) -> "Intent":
        """Accept an Intent or its tag string; anything else is a caller bug."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise UnknownIntentError(value)


Rule = Tuple[Intent, Tuple[str, ...]]


@dataclass(frozen=True)
class IntentResult:
    """Result of intent classification."""

    intent: Intent
    confidence: float
    raw_text: str
    matched_keyword: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.intent is Intent.GENERAL_QUERY

    def metadata(self) -> dict:
        """Metadata attached to the bot's reply in the session log."""
        return {"intent": self.intent.value, "confidence": self.confidence}


def _build_rules(rules: Sequence[Tuple[object, Sequence[str]]]) -> List[Rule]:
    built: List[Rule] = []
    for intent, keywords in rules:
        built.append((Intent.parse(intent), tuple(kw.lower() for kw in keywords)))
    return built


class KeywordIntentClassifier:
    """Ordered keyword-rule intent classifier.

    Strategy:
    - Lowercase the user text (no stemming, no punctuation stripping).
    - Walk the rules in order; stop at the first rule with a keyword that is a
      substring of the text.
    - No match (or empty text) means GENERAL_QUERY.
    """

    def __init__(self, rules: Optional[Sequence[Tuple[object, Sequence[str]]]] = None) -> None:
        self._rules: List[Rule] = _build_rules(INTENT_RULES if rules is None else rules)

    @property
    def rules(self) -> List[Rule]:
        return list(self._rules)

    def classify(self, text: str) -> IntentResult:
        lowered = (text or "").lower()
        if lowered.strip():
            for intent, keywords in self._rules:
                for kw in keywords:
                    if kw in lowered:
                        return IntentResult(
                            intent=intent,
                            confidence=MATCH_CONFIDENCE,
                            raw_text=text,
                            matched_keyword=kw,
                        )
        return IntentResult(intent=Intent.GENERAL_QUERY, confidence=DEFAULT_CONFIDENCE, raw_text=text)


_DEFAULT_CLASSIFIER = KeywordIntentClassifier()


def classify_intent(text: str) -> IntentResult:
    """Convenience function for one-off intent classification."""
    return _DEFAULT_CLASSIFIER.classify(text)


def detect_intent(text: str) -> Intent:
    return _DEFAULT_CLASSIFIER.classify(text).intent


__all__ = ["Intent", "IntentResult", "KeywordIntentClassifier", "classify_intent", "detect_intent"]
