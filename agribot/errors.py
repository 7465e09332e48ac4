"""Exception types shared across the chat engine and its collaborators."""

from __future__ import annotations

from typing import List, Optional


class AgriBotError(Exception):
    """Base class for AgriBot errors."""


class UnknownIntentError(AgriBotError, ValueError):
    """Raised when a caller asks for an intent outside the known set.

    This is a programming error in the caller, never something shown to a farmer.
    """

    def __init__(self, intent: object) -> None:
        super().__init__(f"Unknown intent: {intent!r}")
        self.intent = intent


class ChatValidationError(AgriBotError, ValueError):
    """Request-level validation failure (message length, session id, rating...)."""

    def __init__(self, message: str = "Validation failed", errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors: List[str] = list(errors or [])


class SessionNotFoundError(AgriBotError, LookupError):
    """No chat session with this id (for this farmer)."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Chat session not found: {session_id}")
        self.session_id = session_id


__all__ = ["AgriBotError", "UnknownIntentError", "ChatValidationError", "SessionNotFoundError"]
