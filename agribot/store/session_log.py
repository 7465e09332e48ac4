"""Chat transcript store: sessions of user/bot messages keyed by session id.

`InMemorySessionLog` is the in-process implementation used by the app and
tests. A different backend only needs to satisfy the `SessionLog` protocol.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from agribot.errors import SessionNotFoundError

SENDERS = ("user", "bot")
MESSAGE_TYPES = ("text", "image", "location", "file")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ChatMessage:
    sender: str
    message: str
    timestamp: datetime = field(default_factory=_now)
    message_type: str = "text"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def intent(self) -> Optional[str]:
        return self.metadata.get("intent")


@dataclass
class Satisfaction:
    rating: int
    feedback: Optional[str] = None


@dataclass
class ChatSession:
    session_id: str
    farmer_id: str
    messages: List[ChatMessage] = field(default_factory=list)
    start_time: datetime = field(default_factory=_now)
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # minutes
    satisfaction: Optional[Satisfaction] = None
    topics: List[str] = field(default_factory=list)
    resolved: bool = False
    needs_human_intervention: bool = False

    @property
    def total_messages(self) -> int:
        return len(self.messages)


class SessionLog(Protocol):
    def create_session(self, farmer_id: str, session_id: str) -> ChatSession: ...

    def find_session(self, farmer_id: str, session_id: str) -> Optional[ChatSession]: ...

    def append_message(
        self,
        session_id: str,
        sender: str,
        text: str,
        message_type: str = "text",
        metadata: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> ChatMessage: ...

    def list_sessions(self, farmer_id: str) -> List[ChatSession]: ...

    def end_session(self, farmer_id: str, session_id: str) -> ChatSession: ...

    def record_feedback(
        self, farmer_id: str, session_id: str, rating: int, feedback: Optional[str] = None
    ) -> ChatSession: ...


class InMemorySessionLog:
    """Lock-guarded, append-only transcript store. Returned sessions are copies."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: Dict[str, ChatSession] = {}

    def create_session(self, farmer_id: str, session_id: str) -> ChatSession:
        with self._lock:
            existing = self._sessions.get(session_id)
            if existing is not None:
                if existing.farmer_id != farmer_id:
                    raise ValueError(f"Session id already in use: {session_id}")
                return copy.deepcopy(existing)
            session = ChatSession(session_id=session_id, farmer_id=farmer_id)
            self._sessions[session_id] = session
            return copy.deepcopy(session)

    def find_session(self, farmer_id: str, session_id: str) -> Optional[ChatSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.farmer_id != farmer_id:
                return None
            return copy.deepcopy(session)

    def append_message(
        self,
        session_id: str,
        sender: str,
        text: str,
        message_type: str = "text",
        metadata: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> ChatMessage:
        if sender not in SENDERS:
            raise ValueError(f"Invalid sender: {sender!r}")
        if message_type not in MESSAGE_TYPES:
            raise ValueError(f"Invalid message type: {message_type!r}")
        message = ChatMessage(
            sender=sender,
            message=text,
            message_type=message_type,
            timestamp=timestamp or _now(),
            metadata=dict(metadata or {}),
        )
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            session.messages.append(message)
            # Topics are the intents the bot answered, first occurrence order.
            topic = message.intent
            if sender == "bot" and topic and topic not in session.topics:
                session.topics.append(topic)
        return copy.deepcopy(message)

    def list_sessions(self, farmer_id: str) -> List[ChatSession]:
        with self._lock:
            # Newest first; sessions created in the same instant keep reverse insertion order.
            sessions = [s for s in reversed(list(self._sessions.values())) if s.farmer_id == farmer_id]
            sessions.sort(key=lambda s: s.start_time, reverse=True)
            return copy.deepcopy(sessions)

    def end_session(self, farmer_id: str, session_id: str) -> ChatSession:
        with self._lock:
            session = self._owned(farmer_id, session_id)
            session.end_time = _now()
            session.duration = int((session.end_time - session.start_time).total_seconds() // 60)
            return copy.deepcopy(session)

    def record_feedback(
        self, farmer_id: str, session_id: str, rating: int, feedback: Optional[str] = None
    ) -> ChatSession:
        with self._lock:
            session = self._owned(farmer_id, session_id)
            session.satisfaction = Satisfaction(rating=rating, feedback=feedback)
            session.resolved = rating >= 4
            return copy.deepcopy(session)

    def _owned(self, farmer_id: str, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None or session.farmer_id != farmer_id:
            raise SessionNotFoundError(session_id)
        return session


__all__ = [
    "ChatMessage",
    "ChatSession",
    "InMemorySessionLog",
    "MESSAGE_TYPES",
    "SENDERS",
    "Satisfaction",
    "SessionLog",
]
