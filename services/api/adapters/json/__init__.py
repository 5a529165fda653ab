"""
JSON file storage adapter for the event forms API.
Used when Google Sheets is not configured or failed to initialize.
One JSON array per collection, most recent entry first.
"""
import json
import logging
import threading
from typing import List, Dict, Any
from pathlib import Path

from pydantic import ValidationError

from models import RSVP, Collection, Entry, GuestbookEntry, RsvpEntry, ALL_COLLECTIONS
from ..base import StorageError

logger = logging.getLogger(__name__)


class JsonAdapter:
    """
    JSON file-based storage adapter.
    Stores each collection in its own JSON file under the data directory.
    Writes go through a temp file + rename, and each file's
    read-modify-write is serialized with a lock.
    """

    backend = "json"

    def __init__(self, data_dir: str = "data"):
        """
        Args:
            data_dir: Directory to store JSON files
        """
        self.data_dir = Path(data_dir)
        self._locks: Dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, collection: Collection) -> Path:
        """rsvp.json, rsvp_groom.json, guestbook_bride.json, ..."""
        name = collection.kind if not collection.side else f"{collection.kind}_{collection.side}"
        return self.data_dir / f"{name}.json"

    def initialize(self) -> None:
        """Create the data directory and an empty array file per collection."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for collection in ALL_COLLECTIONS:
            path = self.path_for(collection)
            if not path.exists():
                self._write_file(path, [])

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(path, threading.Lock())

    def _read_file(self, filepath: Path) -> List[Dict[str, Any]]:
        """Read and parse a JSON file. Missing or corrupt files read as []."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to read {filepath}: {e}") from e

        try:
            data = json.loads(raw or "[]")
        except json.JSONDecodeError:
            logger.warning(f"Ignoring corrupt JSON in {filepath}")
            return []
        return data if isinstance(data, list) else []

    def _write_file(self, filepath: Path, data: List[Dict[str, Any]]) -> None:
        """Write data to a JSON file atomically."""
        tmp_file = filepath.with_suffix(".tmp")
        try:
            with open(tmp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp_file.replace(filepath)
        except (OSError, TypeError, ValueError) as e:
            tmp_file.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {filepath}: {e}") from e

    def append_entry(self, entry: Entry) -> None:
        """Insert the entry at the front of its collection file."""
        path = self.path_for(entry.collection)
        with self._lock_for(path):
            records = self._read_file(path)
            records.insert(0, entry.model_dump(exclude_none=True))
            self._write_file(path, records)

    def recent_entries(self, collection: Collection, limit: int) -> List[Entry]:
        """Files are already most-recent-first, so take the head."""
        model = RsvpEntry if collection.kind == RSVP else GuestbookEntry
        out: List[Entry] = []
        for raw in self._read_file(self.path_for(collection)):
            if len(out) >= limit:
                break
            try:
                out.append(model.model_validate(raw))
            except ValidationError:
                logger.warning(f"Skipping malformed {collection.kind} record in {self.path_for(collection)}")
        return out

    def ping(self) -> None:
        """Cheap health check: the data directory must still be there."""
        if not self.data_dir.is_dir():
            raise StorageError(f"Data directory {self.data_dir} is missing")
