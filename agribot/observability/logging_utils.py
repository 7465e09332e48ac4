"""Structured JSON-line logging for chat events."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, Optional


_SESSION_ID_CTX: ContextVar[str] = ContextVar("session_id", default="unknown")
_LOGGER = logging.getLogger("agribot")
_INITIALIZED = False


def init_logging(*, log_path: Optional[str] = None) -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    handlers = []
    if log_path:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
        )
    else:
        handlers.append(logging.StreamHandler())
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )
    _LOGGER.setLevel(logging.INFO)
    _INITIALIZED = True


@contextmanager
def session_scope(session_id: str) -> Iterator[None]:
    """Tag every event logged inside the block with this chat session id."""
    token = _SESSION_ID_CTX.set(session_id)
    try:
        yield
    finally:
        _SESSION_ID_CTX.reset(token)


def get_session_id() -> str:
    return _SESSION_ID_CTX.get() or "unknown"


def summarize_text(text: str, limit: int = 120) -> str:
    if not text:
        return ""
    text = str(text)
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def _build_payload(event: str, fields: Dict[str, Any]) -> str:
    payload = {"event": event, "session_id": get_session_id(), **fields}
    return json.dumps(payload, ensure_ascii=True, default=str)


def log_event(event: str, **fields: Any) -> None:
    _LOGGER.info(_build_payload(event, fields))


def log_error(event: str, **fields: Any) -> None:
    _LOGGER.error(_build_payload(event, fields))
