from __future__ import annotations

from typing import List, Literal, NamedTuple, Optional, Union
from pydantic import BaseModel

RSVP = "rsvp"
GUESTBOOK = "guestbook"

# side key -> display label (used in sheet titles)
SIDES = {
    "groom": "Groom",
    "bride": "Bride",
}


class Collection(NamedTuple):
    """
    One append-only store: a record kind, optionally scoped to a side.
    Entries without a side live in the shared collection of their kind.
    """
    kind: str
    side: Optional[str] = None


ALL_COLLECTIONS: List[Collection] = [
    Collection(kind, side)
    for kind in (RSVP, GUESTBOOK)
    for side in (None, *SIDES)
]


class RsvpEntry(BaseModel):
    """
    Domain model for one RSVP, as persisted.
    Field order is the order written to the local JSON files.
    """
    name: str
    phone: str = ""
    guests: int = 1
    note: str = ""
    type: Literal["RSVP"] = "RSVP"
    timestamp: str
    side: Optional[str] = None

    @property
    def collection(self) -> Collection:
        return Collection(RSVP, self.side)


class GuestbookEntry(BaseModel):
    """
    Domain model for one guestbook message, as persisted.
    """
    name: str
    contact: str = ""
    message: str
    type: Literal["GUESTBOOK"] = "GUESTBOOK"
    timestamp: str
    side: Optional[str] = None

    @property
    def collection(self) -> Collection:
        return Collection(GUESTBOOK, self.side)


Entry = Union[RsvpEntry, GuestbookEntry]
