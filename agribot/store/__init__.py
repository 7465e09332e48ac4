"""Chat transcript storage."""

from agribot.store.session_log import ChatMessage, ChatSession, InMemorySessionLog, SessionLog

__all__ = ["ChatMessage", "ChatSession", "InMemorySessionLog", "SessionLog"]
