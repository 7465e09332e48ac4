"""Pydantic settings and app constants."""
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

# Intent rules, evaluated top to bottom; the first rule with any keyword in the
# lower-cased message wins. Order is the tie-break, so keep it as a list.
INTENT_RULES: List[Tuple[str, Tuple[str, ...]]] = [
    ("disease_detection", ("disease", "sick", "problem")),
    ("irrigation_advice", ("water", "irrigation")),
    ("fertilizer_recommendation", ("fertilizer", "nutrients")),
    ("weather_query", ("weather", "rain")),
    ("harvest_timing", ("harvest", "ready")),
    ("trend_inquiry", ("trend", "statistics")),
    ("treatment_advice", ("treatment", "cure")),
    ("help_request", ("help", "what can you do")),
]

MATCH_CONFIDENCE = 0.85
DEFAULT_CONFIDENCE = 0.0

MESSAGE_MIN_CHARS = 1
MESSAGE_MAX_CHARS = 1000
FEEDBACK_MAX_CHARS = 500

# Shown as one-tap buttons before the first message of a chat.
QUICK_QUESTIONS = [
    {"text": "My wheat crop looks sick, can you help?", "category": "Disease"},
    {"text": "When should I water my crops?", "category": "Irrigation"},
    {"text": "Which fertilizer should I use?", "category": "Nutrition"},
    {"text": "What's the weather forecast?", "category": "Weather"},
    {"text": "When will my crop be ready to harvest?", "category": "Harvest"},
    {"text": "Show me disease trends in my area", "category": "Analytics"},
]

WELCOME_MESSAGE = (
    "Hello! I'm AgriBot, your farming assistant. Ask me about crop diseases, "
    "irrigation, fertilizer, weather, harvest timing or treatments."
)


class Settings(BaseModel):
    google_credentials_path: str = Field(default="", description="Path to Google service account JSON")
    google_sheet_id: str = Field(default="", description="Google Sheet ID for chat transcripts")
    typing_delay_seconds: float = Field(default=1.0, ge=0.0, description="Delay before a reply is shown")
    fallback_seed: Optional[int] = Field(default=None, description="Seed for fallback reply rotation")
    log_path: str = Field(default="", description="Log file path; empty logs to stderr")
    timezone: str = Field(default="Asia/Kolkata", description="Display timezone (IST)")

    def sheets_configured(self) -> bool:
        return bool(self.google_credentials_path.strip()) and bool(self.google_sheet_id.strip())
