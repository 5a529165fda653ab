"""
Google Sheets setup for the event forms API.
Creates/verifies every RSVP and guestbook tab and its header row,
so the first submission after deploy doesn't pay for it.

Usage:
    python init_sheets.py
"""
import sys

from adapters.sheets import HEADERS, SheetsAdapter, sheet_title
from models import ALL_COLLECTIONS
from settings import get_settings


def main() -> int:
    settings = get_settings()
    if not settings.has_sheets_config():
        print("✗ GOOGLE_SPREADSHEET_ID, GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY must all be set")
        return 1

    print("🔧 Initializing Google Sheets...")
    print(f"📄 Spreadsheet ID: {settings.google_spreadsheet_id}\n")

    adapter = SheetsAdapter(
        spreadsheet_id=settings.google_spreadsheet_id.strip(),
        client_email=settings.google_service_account_email.strip(),
        private_key=settings.resolved_private_key(),
    )
    try:
        adapter.initialize()
    except Exception as e:
        print(f"✗ Failed to initialize: {e}")
        return 1

    for collection in ALL_COLLECTIONS:
        print(f"✓ '{sheet_title(collection)}' → {', '.join(HEADERS[collection.kind])}")

    print(f"\n✅ {len(ALL_COLLECTIONS)} tabs ready")
    print(f"   https://docs.google.com/spreadsheets/d/{settings.google_spreadsheet_id}/edit")
    return 0


if __name__ == "__main__":
    sys.exit(main())
