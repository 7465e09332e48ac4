"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

# Ensure project root is on path when running: pytest tests/
_root = Path(__file__).resolve().parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from agribot.config.settings import Settings  # noqa: E402
from agribot.services.chat_service import ChatService  # noqa: E402
from agribot.services.farmer_context import FarmerProfileStore  # noqa: E402
from agribot.services.response_composer import ResponseComposer  # noqa: E402
from agribot.store.session_log import InMemorySessionLog  # noqa: E402


WHEAT_PROFILE = {
    "farmDetails": {
        "cropTypes": [{"name": "wheat", "variety": "HD-2967"}],
        "location": {"city": "Meerut", "state": "Uttar Pradesh"},
        "soilType": "Loamy",
        "irrigationType": "Drip",
    },
    "stats": {"totalQueries": 0, "diseasesDetected": 4, "treatmentsApplied": 2},
}


class FirstChoice:
    """Deterministic RandomSource: always picks the first option."""

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def first_choice() -> FirstChoice:
    return FirstChoice()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def profiles() -> FarmerProfileStore:
    return FarmerProfileStore({"farmer-1": WHEAT_PROFILE})


@pytest.fixture
def session_log() -> InMemorySessionLog:
    return InMemorySessionLog()


@pytest.fixture
def chat_service(session_log: InMemorySessionLog, profiles: FarmerProfileStore) -> ChatService:
    return ChatService(
        session_log=session_log,
        context_provider=profiles,
        settings=Settings(typing_delay_seconds=1.0),
        composer=ResponseComposer(rng=FirstChoice()),
    )
