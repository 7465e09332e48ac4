"""Reply composition: one template function per intent, filled from the farmer context.

Each template is a plain function `FarmerContext -> str` so its defaults can
be read and tested on their own. Only the no-match fallback uses randomness,
and only through the `RandomSource` the caller hands in.
"""

from __future__ import annotations

import math
import random
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, TypeVar, Union

from agribot.services.farmer_context import FarmerContext
from agribot.services.intent_classifier import Intent

T = TypeVar("T")

DEFAULT_CROP = "crops"
DEFAULT_LOCATION = "your area"
DEFAULT_IRRIGATION = "your irrigation system"
DEFAULT_SOIL = "detected soil"

# Shown once any detection exists, whatever the real outcome data says.
# Kept as-is until product confirms how the rate should be computed.
DETECTION_SUCCESS_RATE = "92%"
NEW_DETECTION_RATE = "new - let's start building your success rate!"
NEW_TREATMENT_RATE = "just getting started"


class RandomSource(Protocol):
    def choice(self, seq: Sequence[T]) -> T: ...


ContextLike = Union[FarmerContext, Mapping[str, Any], None]


def as_context(context: ContextLike) -> FarmerContext:
    """Accept a FarmerContext, a plain mapping (snake or camel keys), a stored profile, or None."""
    if isinstance(context, FarmerContext):
        return context
    if not isinstance(context, Mapping):
        return FarmerContext()
    if "farmDetails" in context or "stats" in context:
        return FarmerContext.from_profile(context)
    return FarmerContext.model_validate(dict(context))


def crop_label(ctx: FarmerContext) -> str:
    return ctx.crop_type or DEFAULT_CROP


def location_label(ctx: FarmerContext) -> str:
    return ctx.location_city or DEFAULT_LOCATION


def irrigation_label(ctx: FarmerContext) -> str:
    return ctx.irrigation_type or DEFAULT_IRRIGATION


def soil_label(ctx: FarmerContext) -> str:
    return ctx.soil_type or DEFAULT_SOIL


def detection_success_rate(ctx: FarmerContext) -> str:
    return DETECTION_SUCCESS_RATE if ctx.diseases_detected > 0 else NEW_DETECTION_RATE


def treatment_success_rate(ctx: FarmerContext) -> str:
    if ctx.treatments_applied <= 0:
        return NEW_TREATMENT_RATE
    ratio = ctx.treatments_applied / max(ctx.diseases_detected, 1) * 100
    # Half-up, not banker's rounding: 12.5 shows as 13%.
    return f"{math.floor(ratio + 0.5)}%"


def disease_detection_reply(ctx: FarmerContext) -> str:
    return (
        f"I can help you identify {crop_label(ctx)} diseases! Upload a photo of the affected "
        f"plant leaves, and I'll analyze it for common diseases. Based on recent data in "
        f"{location_label(ctx)}, leaf blight is trending. Your disease detection accuracy rate "
        f"is {detection_success_rate(ctx)}."
    )


def irrigation_advice_reply(ctx: FarmerContext) -> str:
    return (
        f"Based on weather data for {location_label(ctx)} and your {irrigation_label(ctx)}, "
        f"I recommend adjusting your watering schedule. With current conditions, "
        f"{crop_label(ctx)} typically needs watering every 3-4 days. "
        f"I'll factor in the 65% rain chance this week."
    )


def fertilizer_recommendation_reply(ctx: FarmerContext) -> str:
    return (
        f"For {crop_label(ctx)}, I suggest nitrogen-rich fertilizers during vegetative stage. "
        f"Your soil type ({soil_label(ctx)}) shows good phosphorus levels but could benefit "
        f"from additional potassium. Want specific product recommendations?"
    )


def weather_query_reply(ctx: FarmerContext) -> str:
    return (
        f"Weather update for {location_label(ctx)}: 65% chance of rain, low drought risk (15%). "
        f"Perfect conditions for {crop_label(ctx)} with 78% optimal growing conditions! "
        f"Temperature is ideal for growth."
    )


def harvest_timing_reply(ctx: FarmerContext) -> str:
    return (
        f"Your {crop_label(ctx)} will be ready for harvest in approximately 3 months based on "
        f"your planting date. Growth monitoring shows 15-20% higher yield potential than "
        f"average. I'll send notifications when optimal harvest time approaches."
    )


def trend_inquiry_reply(ctx: FarmerContext) -> str:
    return (
        f"Disease trends in {location_label(ctx)} show a 30% decrease this month! "
        f"{crop_label(ctx)} leaf blight cases are down, but watch for root rot in wet areas. "
        f"Check your Disease Trends dashboard for detailed analytics."
    )


def treatment_advice_reply(ctx: FarmerContext) -> str:
    return (
        f"For current disease cases, copper fungicide shows 92% effectiveness for leaf blight. "
        f"Biological treatments work well for root rot. Your treatment success rate is "
        f"{treatment_success_rate(ctx)}!"
    )


def help_request_reply(ctx: FarmerContext) -> str:
    return (
        "I'm your AI farming assistant! I can help with:\n"
        f"• Disease identification from photos ({ctx.diseases_detected} analyzed so far)\n"
        f"• Irrigation scheduling based on {location_label(ctx)} weather\n"
        f"• Fertilizer recommendations for {crop_label(ctx)}\n"
        "• Harvest timing predictions\n"
        "• Treatment effectiveness analysis\n"
        "• Disease trend monitoring in your region\n"
        "\n"
        "What farming challenge can I help you solve today?"
    )


def fallback_replies(ctx: FarmerContext) -> List[str]:
    """Generic clarifying prompts for messages no rule matched."""
    crop = crop_label(ctx)
    location = location_label(ctx)
    return [
        f"Tell me more about your {crop} farming challenges in {location}!",
        (
            "I'm here to help with your agricultural needs. Are you dealing with any plant "
            f"diseases, irrigation concerns, or growth issues with your {crop}?"
        ),
        (
            "What specific challenge can I help you solve on your farm today? "
            f"I have data on {crop} best practices."
        ),
        (
            f"I'd be happy to help! Your farm in {location} might be facing seasonal "
            "challenges - what's your main concern?"
        ),
    ]


TEMPLATES: Dict[Intent, Callable[[FarmerContext], str]] = {
    Intent.DISEASE_DETECTION: disease_detection_reply,
    Intent.IRRIGATION_ADVICE: irrigation_advice_reply,
    Intent.FERTILIZER_RECOMMENDATION: fertilizer_recommendation_reply,
    Intent.WEATHER_QUERY: weather_query_reply,
    Intent.HARVEST_TIMING: harvest_timing_reply,
    Intent.TREND_INQUIRY: trend_inquiry_reply,
    Intent.TREATMENT_ADVICE: treatment_advice_reply,
    Intent.HELP_REQUEST: help_request_reply,
}


def compose(intent: Union[Intent, str], context: ContextLike, rng: RandomSource) -> str:
    """Build the reply for `intent`. Raises UnknownIntentError for intents outside the enum."""
    intent = Intent.parse(intent)
    ctx = as_context(context)
    if intent is Intent.GENERAL_QUERY:
        return rng.choice(fallback_replies(ctx))
    return TEMPLATES[intent](ctx)


class ResponseComposer:
    """Holds the random source used for fallback rotation."""

    def __init__(self, rng: Optional[RandomSource] = None, seed: Optional[int] = None) -> None:
        self._rng: RandomSource = rng if rng is not None else random.Random(seed)

    def compose(self, intent: Union[Intent, str], context: ContextLike) -> str:
        return compose(intent, context, self._rng)


__all__ = [
    "RandomSource",
    "ResponseComposer",
    "TEMPLATES",
    "as_context",
    "compose",
    "detection_success_rate",
    "fallback_replies",
    "treatment_success_rate",
]
