"""Load and validate environment variables. Single source for env handling."""
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root (parent of agribot/)
_root = Path(__file__).resolve().parent.parent.parent
load_dotenv(_root / ".env")


def _get(key: str, default: str = "") -> str:
    """Get config: Streamlit secrets (deployed) then env vars (local)."""
    try:
        import streamlit as st
        if hasattr(st, "secrets") and st.secrets and key in st.secrets:
            return str(st.secrets.get(key, default))
    except Exception:
        pass
    return os.getenv(key, default)


def _get_float(key: str, default: float) -> float:
    raw = _get(key, "").strip()
    if not raw:
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        return default


def _get_int(key: str) -> Optional[int]:
    raw = _get(key, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _resolve_credentials(raw_path: str) -> str:
    """Return a usable credentials file path from a path or inline JSON key."""
    raw_path = str(raw_path).strip()
    if not raw_path:
        return ""
    if raw_path.startswith("{") and "client_email" in raw_path:
        try:
            json.loads(raw_path)
        except ValueError:
            return ""
        fd, path = tempfile.mkstemp(suffix=".json")
        with os.fdopen(fd, "w") as f:
            f.write(raw_path)
        return path
    p = Path(raw_path)
    if not p.is_absolute():
        p = _root / p
    return str(p.resolve()) if p.exists() else ""


def load_env() -> None:
    """Ensure .env is loaded. Call at app startup."""
    load_dotenv(_root / ".env")


def get_settings() -> "Settings":
    """Return validated settings. Uses Streamlit secrets when deployed, else env / .env."""
    from agribot.config.settings import Settings

    raw_path = (
        _get("GOOGLE_SERVICE_ACCOUNT_KEY")
        or _get("GOOGLE_SERVICE_ACCOUNT_KEY_PATH")
        or _get("GOOGLE_APPLICATION_CREDENTIALS", "")
    )
    return Settings(
        google_credentials_path=_resolve_credentials(raw_path),
        google_sheet_id=_get("GOOGLE_SHEET_ID", ""),
        typing_delay_seconds=_get_float("AGRIBOT_TYPING_DELAY", 1.0),
        fallback_seed=_get_int("AGRIBOT_FALLBACK_SEED"),
        log_path=_get("AGRIBOT_LOG_PATH", ""),
        timezone=_get("TIMEZONE", "Asia/Kolkata"),
    )
