"""
In-memory record storage implementation.

Provides a simple dict-backed record store, suitable for testing and
development. Data is lost on restart; use the file or SQLAlchemy store
for durable storage.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from casual_records.errors import DuplicateRecordError, NotFoundError, ValidationError
from casual_records.models import Record
from casual_records.storage.locking import ReadWriteLock

logger = logging.getLogger(__name__)


def require_id(record: Record) -> None:
    """Reject records without a usable id."""
    if not record.id or not record.id.strip():
        raise ValidationError("record ID is required")


class InMemoryRecordStore:
    """
    In-memory implementation of the RecordStore protocol.

    Records are deep-copied on the way in and out so callers can never
    mutate stored state behind the store's back.
    """

    def __init__(self):
        self._records: Dict[str, Record] = {}
        self._lock = ReadWriteLock()

        logger.info("InMemoryRecordStore initialized")

    def store(self, record: Record) -> Record:
        """Store a new record."""
        require_id(record)

        with self._lock.write():
            if record.id in self._records:
                raise DuplicateRecordError(record.id)

            stored = record.model_copy(update={"updated_at": datetime.now()}, deep=True)
            self._records[record.id] = stored

        logger.debug(f"Stored record {record.id} ({record.type})")
        return stored.model_copy(deep=True)

    def get(self, record_id: str) -> Record:
        """Retrieve a record by ID."""
        with self._lock.read():
            record = self._records.get(record_id)
            if record is None:
                raise NotFoundError(record_id)
            return record.model_copy(deep=True)

    def list(self, record_type: Optional[str] = None) -> List[Record]:
        """List records, optionally filtered by type."""
        with self._lock.read():
            return [
                record.model_copy(deep=True)
                for record in self._records.values()
                if not record_type or record.type == record_type
            ]

    def update(self, record: Record) -> Record:
        """Replace an existing record, keeping its original created_at."""
        require_id(record)

        with self._lock.write():
            existing = self._records.get(record.id)
            if existing is None:
                raise NotFoundError(record.id)

            updated = record.model_copy(
                update={"created_at": existing.created_at, "updated_at": datetime.now()},
                deep=True,
            )
            self._records[record.id] = updated

        logger.debug(f"Updated record {record.id}")
        return updated.model_copy(deep=True)

    def delete(self, record_id: str) -> None:
        """Delete a record."""
        with self._lock.write():
            if record_id not in self._records:
                raise NotFoundError(record_id)
            del self._records[record_id]

        logger.debug(f"Deleted record {record_id}")

    def clear(self):
        """Clear ALL records from the store."""
        with self._lock.write():
            count = len(self._records)
            self._records.clear()
        logger.info(f"Cleared all records ({count} total)")

    def close(self) -> None:
        """No resources to release."""
