"""Key-value storage collaborators for the notes blob."""

from __future__ import annotations
from datetime import datetime, UTC
import logging
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from .db import init_db, session_scope
from .errors import PersistenceFailure
from .models import StorageEntry

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, blob: str) -> None: ...


class SqlStorage:
    """Stores blobs in the StorageEntry table of the configured SQLite file."""

    def __init__(self, create_tables: bool = True):
        if create_tables:
            init_db()

    def read(self, key: str) -> Optional[str]:
        try:
            with session_scope() as s:
                entry = s.get(StorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"could not read '{key}': {e}") from e

    def write(self, key: str, blob: str) -> None:
        try:
            with session_scope() as s:
                entry = s.get(StorageEntry, key)
                if entry is None:
                    entry = StorageEntry(key=key)
                entry.value = blob
                entry.updated_at = datetime.now(UTC)
                s.add(entry)
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"could not write '{key}': {e}") from e
        logger.debug("Wrote %d bytes under '%s'", len(blob), key)


class MemoryStorage:
    """In-process storage; nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, blob: str) -> None:
        self.data[key] = blob
        self.writes += 1
