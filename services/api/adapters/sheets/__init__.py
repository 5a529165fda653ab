# services/api/adapters/sheets/__init__.py
from __future__ import annotations

import logging
from typing import Any, List, Optional

import gspread
from cachetools import TTLCache
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from models import RSVP, GUESTBOOK, SIDES, Collection, Entry, ALL_COLLECTIONS
from models.converters import entry_from_sheets, entry_to_row
from ..base import StorageAdapter, StorageError

logger = logging.getLogger(__name__)

# ========== Sheet schema (HEADERS) ==========

HEADERS = {
    RSVP: ["Timestamp", "Name", "Phone", "Guests", "Note"],
    GUESTBOOK: ["Timestamp", "Name", "Contact", "Message"],
}

SHEET_BASE_TITLES = {
    RSVP: "RSVP",
    GUESTBOOK: "Guestbook",
}

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def sheet_title(collection: Collection) -> str:
    """RSVP, RSVP - Groom, Guestbook - Bride, ..."""
    base = SHEET_BASE_TITLES[collection.kind]
    if not collection.side:
        return base
    return f"{base} - {SIDES[collection.side]}"


def _data_range(kind: str) -> str:
    """Everything below the header row, e.g. A2:D for the guestbook."""
    last_col = chr(ord("A") + len(HEADERS[kind]) - 1)
    return f"A2:{last_col}"


def _sa_client_from_credentials(client_email: str, private_key: str) -> gspread.Client:
    """
    Build an authorized gspread Client from a service-account email and
    PEM private key (no JSON key file needed).
    """
    if not client_email or not private_key:
        raise ValueError("Service account email and private key are required.")

    info = {
        "type": "service_account",
        "client_email": client_email,
        "private_key": private_key,
        "token_uri": TOKEN_URI,
    }
    creds = Credentials.from_service_account_info(info, scopes=SCOPES)
    return gspread.authorize(creds)


# ========== Retry decorator for Google Sheets API calls ==========
def retry_sheets_api(func):
    """Decorator to retry Sheets API calls with exponential backoff on quota errors."""
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((gspread.exceptions.APIError,)),
        reraise=True,
    )
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


class SheetsAdapter(StorageAdapter):
    """
    Google Sheets implementation:
    - One worksheet per collection, header row in row 1
    - Rows appended chronologically (oldest at the top)
    - Retry logic for reliability
    - Short TTL cache for guestbook reads, dropped on write
    """

    backend = "sheets"

    def __init__(
        self,
        spreadsheet_id: str,
        client_email: str,
        private_key: str,
        client: Optional[gspread.Client] = None,
        cache_ttl: float = 5,
    ) -> None:
        if not spreadsheet_id or not client_email or not private_key:
            raise ValueError(
                "SheetsAdapter requires GOOGLE_SPREADSHEET_ID, "
                "GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY"
            )

        self.spreadsheet_id = spreadsheet_id
        self.client_email = client_email
        self._private_key = private_key
        self.gc = client
        self.ss: Optional[gspread.Spreadsheet] = None

        # sheet title -> worksheet, filled as sheets are verified
        self.ws: dict[str, gspread.Worksheet] = {}
        self._rows_cache: TTLCache = TTLCache(maxsize=32, ttl=cache_ttl)

    # ========== Worksheet helpers ==========

    def _spreadsheet(self) -> gspread.Spreadsheet:
        if self.ss is None:
            if self.gc is None:
                self.gc = _sa_client_from_credentials(self.client_email, self._private_key)
            self.ss = self.gc.open_by_key(self.spreadsheet_id)
        return self.ss

    @retry_sheets_api
    def _ensure_worksheet(self, collection: Collection) -> gspread.Worksheet:
        """Return the collection's worksheet, creating it and its header row if needed."""
        title = sheet_title(collection)
        if title in self.ws:
            return self.ws[title]

        ss = self._spreadsheet()
        try:
            ws = ss.worksheet(title)
        except gspread.WorksheetNotFound:
            logger.info(f"📝 Creating sheet '{title}'")
            ws = ss.add_worksheet(
                title=title,
                rows=200,
                cols=len(HEADERS[collection.kind]) + 2,
            )

        # Only write headers into an empty row 1; never rewrite a user's header
        existing = ws.get_values("1:1")
        if not existing or not any(existing[0]):
            ws.update(values=[HEADERS[collection.kind]], range_name="A1")

        self.ws[title] = ws
        return ws

    @retry_sheets_api
    def _append_rows(self, ws: gspread.Worksheet, rows: list[list[Any]]) -> None:
        """Append rows to a worksheet. WITH RETRY."""
        if rows:
            ws.append_rows(
                rows,
                value_input_option="USER_ENTERED",
                insert_data_option="INSERT_ROWS",
            )

    @retry_sheets_api
    def _get_rows(self, ws: gspread.Worksheet, kind: str) -> list[list[Any]]:
        """Get all data rows (header excluded), blank rows dropped. WITH RETRY."""
        # An empty range comes back as [[]], not []
        rows = ws.get_values(_data_range(kind))
        return [r for r in rows if any(str(c).strip() for c in r)]

    # ========== StorageAdapter API ==========

    def initialize(self) -> None:
        """Verify/create every worksheet and header row. Errors propagate to the selector."""
        for collection in ALL_COLLECTIONS:
            self._ensure_worksheet(collection)
        logger.info(f"✓ Google Sheets initialized with {len(self.ws)} sheets")

    def append_entry(self, entry: Entry) -> None:
        collection = entry.collection
        try:
            ws = self._ensure_worksheet(collection)
            self._append_rows(ws, [entry_to_row(entry)])
        except (gspread.exceptions.GSpreadException, GoogleAuthError, OSError, ValueError) as e:
            raise StorageError(f"Failed to append to '{sheet_title(collection)}': {e}") from e
        finally:
            self._rows_cache.pop(sheet_title(collection), None)

    def recent_entries(self, collection: Collection, limit: int) -> List[Entry]:
        """Sheets hold oldest-first: take the last `limit` rows and reverse them."""
        title = sheet_title(collection)
        rows = self._rows_cache.get(title)
        if rows is None:
            try:
                ws = self._ensure_worksheet(collection)
                rows = self._get_rows(ws, collection.kind)
            except (gspread.exceptions.GSpreadException, GoogleAuthError, OSError, ValueError) as e:
                raise StorageError(f"Failed to read '{title}': {e}") from e
            self._rows_cache[title] = rows

        if limit <= 0:
            return []
        recent = rows[-limit:]
        return [entry_from_sheets(collection, row) for row in reversed(recent)]

    def ping(self) -> None:
        """Cheap connectivity check used by /health."""
        ws = self._ensure_worksheet(Collection(GUESTBOOK))
        ws.acell("A1")
