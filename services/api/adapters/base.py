"""
Storage adapter interface for the event forms API.
Defines the contract that both storage backends implement.
"""

from typing import Protocol, List

from models import Collection, Entry


class StorageError(Exception):
    """Raised by adapters when a read or write against the backend fails."""


class StorageAdapter(Protocol):
    """
    Protocol defining the interface for all storage adapters.

    This allows swapping between Google Sheets and local JSON files
    without changing the router or business logic code. Every collection
    is append-only; nothing is ever updated or deleted.
    """

    # Short backend name reported by /health ("sheets" or "json")
    backend: str

    def initialize(self) -> None:
        """
        Prepare every collection (worksheet + header row, or JSON file).

        Called once at startup. Any exception raised here makes the
        selector fall back to local storage.
        """
        ...

    def append_entry(self, entry: Entry) -> None:
        """
        Append one entry to the collection it belongs to.

        Raises:
            StorageError: if the backend could not persist the entry
        """
        ...

    def recent_entries(self, collection: Collection, limit: int) -> List[Entry]:
        """
        Return up to `limit` entries of a collection, most recent first.

        Raises:
            StorageError: if the backend could not be read
        """
        ...

    def ping(self) -> None:
        """Cheap reachability check for /health. Raises on failure."""
        ...
