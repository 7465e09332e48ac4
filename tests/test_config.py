"""Unit tests for env-driven settings and structured logging."""

from __future__ import annotations

import json
import logging

import pytest

from agribot.config import Settings, get_settings
from agribot.observability import logging_utils


class TestGetSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key in (
            "GOOGLE_SERVICE_ACCOUNT_KEY",
            "GOOGLE_SERVICE_ACCOUNT_KEY_PATH",
            "GOOGLE_APPLICATION_CREDENTIALS",
            "GOOGLE_SHEET_ID",
            "AGRIBOT_TYPING_DELAY",
            "AGRIBOT_FALLBACK_SEED",
            "AGRIBOT_LOG_PATH",
            "TIMEZONE",
        ):
            monkeypatch.delenv(key, raising=False)
        settings = get_settings()
        assert settings.typing_delay_seconds == 1.0
        assert settings.fallback_seed is None
        assert settings.sheets_configured() is False

    def test_env_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGRIBOT_TYPING_DELAY", "0.25")
        monkeypatch.setenv("AGRIBOT_FALLBACK_SEED", "11")
        monkeypatch.setenv("GOOGLE_SHEET_ID", "abc")
        settings = get_settings()
        assert settings.typing_delay_seconds == 0.25
        assert settings.fallback_seed == 11
        assert settings.google_sheet_id == "abc"

    def test_bad_numbers_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGRIBOT_TYPING_DELAY", "soon")
        monkeypatch.setenv("AGRIBOT_FALLBACK_SEED", "seven")
        settings = get_settings()
        assert settings.typing_delay_seconds == 1.0
        assert settings.fallback_seed is None

    def test_inline_json_key_written_to_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOGLE_SERVICE_ACCOUNT_KEY", json.dumps({"client_email": "bot@example.com"}))
        monkeypatch.setenv("GOOGLE_SHEET_ID", "abc")
        settings = get_settings()
        assert settings.google_credentials_path.endswith(".json")
        assert settings.sheets_configured() is True

    def test_settings_model(self) -> None:
        assert Settings(google_credentials_path="/k.json", google_sheet_id="abc").sheets_configured()
        assert not Settings(google_credentials_path="/k.json").sheets_configured()


class TestLogEvent:
    def test_payload_carries_session(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="agribot"):
            with logging_utils.session_scope("sess-1"):
                logging_utils.log_event("chat_message_processed", intent="weather_query")
            logging_utils.log_event("outside")
        payloads = [json.loads(r.getMessage()) for r in caplog.records]
        assert payloads[0] == {"event": "chat_message_processed", "session_id": "sess-1", "intent": "weather_query"}
        assert payloads[1]["session_id"] == "unknown"

    def test_summarize_text(self) -> None:
        assert logging_utils.summarize_text("short") == "short"
        assert logging_utils.summarize_text("x" * 200, limit=10) == "x" * 10 + "..."
        assert logging_utils.summarize_text("") == ""
