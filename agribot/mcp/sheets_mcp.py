"""Google Sheets adapter: mirror chat transcripts into a farm's record sheet."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

# Columns: A=timestamp, B=session_id, C=sender, D=message, E=intent, F=confidence
SHEET_RANGE = "A:F"
_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _get_credentials(credentials_path: str):
    if not credentials_path or not Path(credentials_path).exists():
        return None
    from google.oauth2 import service_account
    return service_account.Credentials.from_service_account_file(credentials_path, scopes=_SCOPES)


def _permission_hint() -> str:
    return (
        "Sheets 403: The caller does not have permission. "
        "Share this Google Sheet with your service account email (client_email in the JSON key) as Editor."
    )


def append_chat_rows(
    sheet_id: str,
    credentials_path: str,
    rows: Sequence[Sequence[str]],
) -> tuple[bool, str]:
    """
    Append transcript rows to the chat log sheet.
    Columns: timestamp, session_id, sender, message, intent, confidence.
    Returns (success, message); never raises.
    """
    if not sheet_id or not credentials_path:
        return True, "Sheets skipped (no sheet ID or credentials)"
    if not rows:
        return True, "Sheets skipped (nothing to append)"
    creds = _get_credentials(credentials_path)
    if not creds:
        return True, "Sheets skipped (credentials file not found)"
    try:
        from googleapiclient.discovery import build
        from googleapiclient.errors import HttpError
    except ImportError as e:
        return False, f"Sheets error: {e}"
    try:
        values: List[List[str]] = [[str(cell) for cell in row] for row in rows]
        service = build("sheets", "v4", credentials=creds)
        service.spreadsheets().values().append(
            spreadsheetId=sheet_id,
            range=SHEET_RANGE,
            valueInputOption="USER_ENTERED",
            insertDataOption="INSERT_ROWS",
            body={"values": values},
        ).execute()
        return True, f"{len(values)} chat row(s) logged to sheet"
    except HttpError as e:
        if e.resp.status == 403:
            return False, _permission_hint()
        return False, f"Sheets error: {e}"
    except Exception as e:
        return False, f"Sheets error: {e}"


__all__ = ["SHEET_RANGE", "append_chat_rows"]
