"""Chat request handling: validate, classify, compose, then log the exchange.

Flow for one message:
- validate message length and session id
- load the farmer context for the user
- classify the message and compose the reply (both before touching the log)
- append the user message, then the bot reply tagged with intent/confidence
- bump the user's query counter

The service never sleeps. A typing delay is only reflected in the bot
message timestamp (stored and returned); callers decide whether to wait.
"""

from __future__ import annotations

import math
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Protocol, Tuple

from agribot.config.settings import (
    FEEDBACK_MAX_CHARS,
    MESSAGE_MAX_CHARS,
    MESSAGE_MIN_CHARS,
    Settings,
)
from agribot.errors import ChatValidationError
from agribot.observability.logging_utils import log_event, session_scope, summarize_text
from agribot.services.farmer_context import FarmerContext
from agribot.services.intent_classifier import IntentResult, KeywordIntentClassifier
from agribot.services.response_composer import ResponseComposer
from agribot.store.session_log import ChatMessage, ChatSession, SessionLog

DEFAULT_TOP_TOPIC = "Disease identification"
TOP_TOPICS_LIMIT = 10


class ContextProvider(Protocol):
    def get_farmer_context(self, user_id: str) -> FarmerContext: ...

    def increment_stat(self, user_id: str, name: str, amount: int = 1) -> int: ...


@dataclass
class ChatExchange:
    session_id: str
    user_message: ChatMessage
    bot_response: ChatMessage
    classification: IntentResult

    @property
    def reply(self) -> str:
        return self.bot_response.message


@dataclass
class HistoryPage:
    chats: List[ChatSession]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass
class ChatAnalytics:
    total_sessions: int = 0
    total_messages: int = 0
    avg_duration: Optional[float] = None
    avg_satisfaction: Optional[float] = None
    resolved_sessions: int = 0
    top_topics: List[Tuple[str, int]] = field(default_factory=list)
    recent_sessions: List[ChatSession] = field(default_factory=list)

    @property
    def most_asked_topic(self) -> str:
        return self.top_topics[0][0] if self.top_topics else DEFAULT_TOP_TOPIC


def _is_uuid4(value: str) -> bool:
    try:
        return uuid.UUID(str(value)).version == 4
    except (ValueError, AttributeError, TypeError):
        return False


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def validate_message(message: str) -> str:
    """Return the trimmed message or raise ChatValidationError."""
    text = message.strip() if isinstance(message, str) else ""
    if not MESSAGE_MIN_CHARS <= len(text) <= MESSAGE_MAX_CHARS:
        raise ChatValidationError(
            errors=[f"Message must be between {MESSAGE_MIN_CHARS} and {MESSAGE_MAX_CHARS} characters"]
        )
    return text


class ChatService:
    """Encapsulates the chat request handler on top of classifier and composer."""

    def __init__(
        self,
        session_log: SessionLog,
        context_provider: ContextProvider,
        settings: Optional[Settings] = None,
        classifier: Optional[KeywordIntentClassifier] = None,
        composer: Optional[ResponseComposer] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._log = session_log
        self._contexts = context_provider
        self._classifier = classifier or KeywordIntentClassifier()
        self._composer = composer or ResponseComposer(seed=self._settings.fallback_seed)

    # Public API ---------------------------------------------------------
    def send_message(
        self,
        user_id: str,
        message: str,
        session_id: Optional[str] = None,
        message_type: str = "text",
    ) -> ChatExchange:
        text = validate_message(message)
        if session_id is not None and not _is_uuid4(session_id):
            raise ChatValidationError(errors=["Invalid session ID format"])

        context = self._contexts.get_farmer_context(user_id)
        classification = self._classifier.classify(text)
        reply = self._composer.compose(classification.intent, context)

        session = self._get_or_create_session(user_id, session_id)
        sent_at = datetime.now(timezone.utc)
        replied_at = sent_at + timedelta(seconds=self._settings.typing_delay_seconds)
        with session_scope(session.session_id):
            user_message = self._log.append_message(
                session.session_id, "user", text, message_type, timestamp=sent_at
            )
            bot_message = self._log.append_message(
                session.session_id, "bot", reply, "text", classification.metadata(), timestamp=replied_at
            )
            self._contexts.increment_stat(user_id, "totalQueries")
            log_event(
                "chat_message_processed",
                user_id=user_id,
                intent=classification.intent.value,
                matched_keyword=classification.matched_keyword,
                fallback=classification.is_default,
                message=summarize_text(text),
            )
        return ChatExchange(
            session_id=session.session_id,
            user_message=user_message,
            bot_response=bot_message,
            classification=classification,
        )

    def get_history(
        self, user_id: str, session_id: Optional[str] = None, limit: int = 10, page: int = 1
    ) -> HistoryPage:
        limit = max(1, int(limit))
        page = max(1, int(page))
        sessions = self._log.list_sessions(user_id)
        if session_id:
            sessions = [s for s in sessions if s.session_id == session_id]
        start = (page - 1) * limit
        return HistoryPage(chats=sessions[start:start + limit], page=page, limit=limit, total=len(sessions))

    def submit_feedback(
        self, user_id: str, session_id: str, rating: int, feedback: Optional[str] = None
    ) -> ChatSession:
        errors: List[str] = []
        if not _is_uuid4(session_id):
            errors.append("Valid session ID is required")
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            errors.append("Rating must be between 1 and 5")
        if feedback is not None and len(feedback) > FEEDBACK_MAX_CHARS:
            errors.append(f"Feedback cannot exceed {FEEDBACK_MAX_CHARS} characters")
        if errors:
            raise ChatValidationError(errors=errors)

        session = self._log.record_feedback(user_id, session_id, rating, feedback)
        with session_scope(session_id):
            log_event("chat_feedback_received", user_id=user_id, rating=rating, resolved=session.resolved)
        return session

    def end_session(self, user_id: str, session_id: str) -> ChatSession:
        session = self._log.end_session(user_id, session_id)
        with session_scope(session_id):
            log_event("chat_session_ended", user_id=user_id, duration=session.duration)
        return session

    def get_analytics(self, user_id: str) -> ChatAnalytics:
        sessions = self._log.list_sessions(user_id)
        if not sessions:
            return ChatAnalytics()
        topic_counts = Counter(topic for s in sessions for topic in s.topics)
        # Ties keep first-seen order, newest session first.
        top_topics = sorted(topic_counts.items(), key=lambda kv: -kv[1])[:TOP_TOPICS_LIMIT]
        return ChatAnalytics(
            total_sessions=len(sessions),
            total_messages=sum(s.total_messages for s in sessions),
            avg_duration=_mean([s.duration for s in sessions if s.duration is not None]),
            avg_satisfaction=_mean([s.satisfaction.rating for s in sessions if s.satisfaction]),
            resolved_sessions=sum(1 for s in sessions if s.resolved),
            top_topics=top_topics,
            recent_sessions=sessions[:5],
        )

    # Internals ----------------------------------------------------------
    def _get_or_create_session(self, user_id: str, session_id: Optional[str]) -> ChatSession:
        if session_id:
            session = self._log.find_session(user_id, session_id)
            if session is not None:
                return session
        try:
            return self._log.create_session(user_id, session_id or str(uuid.uuid4()))
        except ValueError:
            # Id taken by another farmer: start a fresh session instead of exposing theirs.
            return self._log.create_session(user_id, str(uuid.uuid4()))


__all__ = [
    "ChatAnalytics",
    "ChatExchange",
    "ChatService",
    "ContextProvider",
    "HistoryPage",
    "validate_message",
]
