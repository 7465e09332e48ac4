"""Orchestration: mirror a finished chat exchange to external records (Google Sheets)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from agribot.mcp.sheets_mcp import append_chat_rows
from agribot.observability.logging_utils import log_error, session_scope

if TYPE_CHECKING:
    from agribot.config.settings import Settings
    from agribot.services.chat_service import ChatExchange
    from agribot.store.session_log import ChatMessage


@dataclass
class MirrorResult:
    sheets: tuple[bool, str] = (True, "skipped")
    errors: List[str] = field(default_factory=list)

    def all_ok(self) -> bool:
        return self.sheets[0]


def _zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def _row(session_id: str, message: "ChatMessage", zone: ZoneInfo) -> List[str]:
    confidence = message.metadata.get("confidence")
    return [
        message.timestamp.astimezone(zone).strftime("%Y-%m-%d %H:%M:%S %Z"),
        session_id,
        message.sender,
        message.message,
        message.metadata.get("intent") or "",
        "" if confidence is None else f"{confidence:.2f}",
    ]


def exchange_rows(exchange: "ChatExchange", tz_name: str = "UTC") -> List[List[str]]:
    """
    User row first, then the bot row carrying intent and confidence.
    Timestamps are rendered in `tz_name`; an unknown zone falls back to UTC.
    """
    zone = _zone(tz_name)
    return [
        _row(exchange.session_id, exchange.user_message, zone),
        _row(exchange.session_id, exchange.bot_response, zone),
    ]


def on_exchange_complete(exchange: "ChatExchange", settings: "Settings") -> MirrorResult:
    """
    Append the user message and bot reply to the transcript sheet.
    Skipped (not an error) when Sheets is not configured.
    """
    result = MirrorResult()
    if not settings.sheets_configured():
        return result

    result.sheets = append_chat_rows(
        sheet_id=settings.google_sheet_id,
        credentials_path=settings.google_credentials_path,
        rows=exchange_rows(exchange, settings.timezone),
    )
    if not result.sheets[0]:
        result.errors.append(result.sheets[1])
        with session_scope(exchange.session_id):
            log_error("transcript_mirror_failed", reason=result.sheets[1])
    return result


__all__ = ["MirrorResult", "exchange_rows", "on_exchange_complete"]
