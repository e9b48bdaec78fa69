from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import List, Optional

from .exceptions import ValidationError
from .models import NoteEntity
from .schemas import TITLE_REQUIRED, normalize_title
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time as an ISO8601 string with microseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def require_title(title: str) -> str:
    """Trim a title for storage, raising ValidationError when it is blank."""
    try:
        return normalize_title(title)
    except ValueError as exc:
        raise ValidationError(TITLE_REQUIRED) from exc


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Storage contract for notes.

    Each call is a single atomic operation; there are no multi-call
    transactions and no retries.
    """

    @abstractmethod
    def insert(self, title: str, body: str) -> NoteEntity:
        """Create a note with created_at == updated_at == now and return it."""

    @abstractmethod
    def list(self) -> List[NoteEntity]:
        """Return every note, most recently updated first."""

    @abstractmethod
    def get(self, note_id: int) -> Optional[NoteEntity]:
        """Return the note with this id, or None if it does not exist."""

    @abstractmethod
    def update(self, note_id: int, title: str, body: str) -> bool:
        """Replace title and body, refresh updated_at. Return False if no note matched."""

    @abstractmethod
    def delete(self, note_id: int) -> bool:
        """Hard-delete a note. Return False if no note matched."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and throwaway runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, NoteEntity] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def insert(self, title: str, body: str) -> NoteEntity:
        title = require_title(title)
        now = utc_now_iso()
        with self._lock:
            entity: NoteEntity = {
                "id": self._allocate_id(),
                "title": title,
                "body": body,
                "created_at": now,
                "updated_at": now,
            }
            self._items[entity["id"]] = entity
            return entity.copy()  # type: ignore[return-value]

    def list(self) -> List[NoteEntity]:
        with self._lock:
            items = sorted(
                self._items.values(),
                key=lambda n: (n["updated_at"], n["id"]),
                reverse=True,
            )
            # Return copies to avoid external mutation
            return [n.copy() for n in items]  # type: ignore[misc]

    def get(self, note_id: int) -> Optional[NoteEntity]:
        with self._lock:
            item = self._items.get(note_id)
            return None if item is None else item.copy()  # type: ignore[return-value]

    def update(self, note_id: int, title: str, body: str) -> bool:
        title = require_title(title)
        with self._lock:
            existing = self._items.get(note_id)
            if existing is None:
                return False
            updated = existing.copy()
            updated["title"] = title
            updated["body"] = body
            updated["updated_at"] = utc_now_iso()
            self._items[note_id] = updated  # type: ignore[assignment]
            return True

    def delete(self, note_id: int) -> bool:
        with self._lock:
            return self._items.pop(note_id, None) is not None


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Build the repository selected by settings.persistence_backend.
    - sqlite: SQLiteRepository at settings.sqlite_db_path (default)
    - memory: InMemoryRepository
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "memory":
        logger.info("Using in-memory note storage")
        return InMemoryRepository()

    from .db import SQLiteRepository

    logger.info("Using SQLite note storage at %s", settings.sqlite_db_path)
    return SQLiteRepository(settings.sqlite_db_path)
