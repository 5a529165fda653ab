from __future__ import annotations

from typing import Any, List, Optional

from . import RSVP, Collection, Entry, GuestbookEntry, RsvpEntry


def _cell(row: List[Any], idx: int) -> str:
    """Sheets drops trailing empty cells, so short rows are normal."""
    if idx >= len(row) or row[idx] is None:
        return ""
    return str(row[idx])


def _int_from_sheet(v: Any, default: int = 1) -> int:
    try:
        s = str(v).strip()
        if s == "":
            return default
        # USER_ENTERED may hand back "3.0"
        return int(float(s))
    except (TypeError, ValueError):
        return default


def entry_to_row(entry: Entry) -> List[Any]:
    """
    Convert an entry into a sheet row (column order matches HEADERS).
    The side is implied by which sheet the row lands in.
    """
    if isinstance(entry, RsvpEntry):
        return [entry.timestamp, entry.name, entry.phone, entry.guests, entry.note]
    return [entry.timestamp, entry.name, entry.contact, entry.message]


def rsvp_from_sheets(row: List[Any], side: Optional[str] = None) -> RsvpEntry:
    return RsvpEntry(
        timestamp=_cell(row, 0),
        name=_cell(row, 1),
        phone=_cell(row, 2),
        guests=_int_from_sheet(_cell(row, 3)),
        note=_cell(row, 4),
        side=side,
    )


def guestbook_from_sheets(row: List[Any], side: Optional[str] = None) -> GuestbookEntry:
    return GuestbookEntry(
        timestamp=_cell(row, 0),
        name=_cell(row, 1),
        contact=_cell(row, 2),
        message=_cell(row, 3),
        side=side,
    )


def entry_from_sheets(collection: Collection, row: List[Any]) -> Entry:
    if collection.kind == RSVP:
        return rsvp_from_sheets(row, collection.side)
    return guestbook_from_sheets(row, collection.side)
