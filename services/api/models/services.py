# services/api/models/services.py

from __future__ import annotations

from typing import Any, List, Optional

from core.timestamps import format_timestamp
from core.validation import clean_text, coerce_guest_count, normalize_side, require_text
from . import GUESTBOOK, Collection, GuestbookEntry, RsvpEntry


class EntryService:
    """
    Business rules for submissions:
      - validate required fields before anything touches storage
      - coerce loose form input (guest count, side, timestamp)
      - write to / read from whichever adapter was selected at startup
    """

    def __init__(self, adapter, offset_hours: int = 7) -> None:
        self.adapter = adapter
        self.offset_hours = offset_hours

    # ---------- building entries from API payloads ----------

    def build_rsvp(
        self,
        name: Any,
        phone: Any = "",
        guests: Any = 1,
        note: Any = "",
        timestamp: Any = None,
        side: Any = None,
    ) -> RsvpEntry:
        require_text(name, message="Name is required")
        return RsvpEntry(
            name=clean_text(name),
            phone=clean_text(phone),
            guests=coerce_guest_count(guests),
            note=clean_text(note),
            timestamp=format_timestamp(timestamp, self.offset_hours),
            side=normalize_side(side),
        )

    def build_guestbook(
        self,
        name: Any,
        message: Any,
        contact: Any = "",
        timestamp: Any = None,
        side: Any = None,
    ) -> GuestbookEntry:
        require_text(name, message, message="Name and message are required")
        return GuestbookEntry(
            name=clean_text(name),
            contact=clean_text(contact),
            message=clean_text(message),
            timestamp=format_timestamp(timestamp, self.offset_hours),
            side=normalize_side(side),
        )

    # ---------- writer / reader ----------

    def save(self, entry: RsvpEntry | GuestbookEntry) -> None:
        """Append one entry to the active backend. Raises StorageError on failure."""
        self.adapter.append_entry(entry)

    def list_guestbook(self, side: Optional[str], limit: int) -> List[GuestbookEntry]:
        """Up to `limit` guestbook entries, most recent first, whatever the backend."""
        return self.adapter.recent_entries(Collection(GUESTBOOK, side), limit)
