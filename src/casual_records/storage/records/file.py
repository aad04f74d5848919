"""
File-backed record storage implementation.

Each record lives in its own ``<id>.json`` file under a base directory.
All files are loaded into an in-memory cache on startup; reads are served
from the cache and every mutation is written to disk before it returns.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from casual_records.errors import (
    DuplicateRecordError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from casual_records.models import Record
from casual_records.storage.locking import ReadWriteLock
from casual_records.storage.records.memory import require_id

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


class FileRecordStore:
    """
    JSON-file implementation of the RecordStore protocol.

    Example:
        store = FileRecordStore("./data/records")
        store.store(Record(id="r1", type="receipt", content="Total: $12.50"))
    """

    def __init__(self, base_path: str | Path):
        """
        Initialize the store and load existing records.

        Args:
            base_path: Directory holding one JSON file per record

        Raises:
            StorageIOError: If the directory cannot be created or a record
                file cannot be read or parsed
        """
        self.base_path = Path(base_path)
        self._records: Dict[str, Record] = {}
        self._lock = ReadWriteLock()

        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"failed to create storage directory {self.base_path}: {e}") from e

        self._load_records()
        logger.info(
            f"FileRecordStore initialized (path={self.base_path}, records={len(self._records)})"
        )

    def _path_for(self, record_id: str) -> Path:
        if record_id in (".", "..") or "/" in record_id or "\\" in record_id:
            raise ValidationError(f"record ID cannot be used as a file name: {record_id!r}")
        return self.base_path / f"{record_id}{RECORD_SUFFIX}"

    def _load_records(self) -> None:
        for path in sorted(self.base_path.glob(f"*{RECORD_SUFFIX}")):
            if not path.is_file():
                continue
            try:
                record = Record.model_validate_json(path.read_text(encoding="utf-8"))
            except OSError as e:
                raise StorageIOError(f"failed to read {path.name}: {e}") from e
            except PydanticValidationError as e:
                raise StorageIOError(f"failed to parse {path.name}: {e}") from e
            self._records[record.id] = record

    def _write(self, record: Record) -> None:
        path = self._path_for(record.id)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            tmp_path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageIOError(f"failed to write record {record.id}: {e}") from e

    def store(self, record: Record) -> Record:
        """Store a new record on disk and in the cache."""
        require_id(record)
        self._path_for(record.id)

        with self._lock.write():
            if record.id in self._records:
                raise DuplicateRecordError(record.id)

            stored = record.model_copy(update={"updated_at": datetime.now()}, deep=True)
            self._write(stored)
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
            self._write(updated)
            self._records[record.id] = updated

        logger.debug(f"Updated record {record.id}")
        return updated.model_copy(deep=True)

    def delete(self, record_id: str) -> None:
        """Delete a record from disk and the cache."""
        with self._lock.write():
            if record_id not in self._records:
                raise NotFoundError(record_id)

            try:
                self._path_for(record_id).unlink(missing_ok=True)
            except OSError as e:
                raise StorageIOError(f"failed to delete record {record_id}: {e}") from e
            del self._records[record_id]

        logger.debug(f"Deleted record {record_id}")

    def close(self) -> None:
        """Drop the in-memory cache; files stay on disk."""
        with self._lock.write():
            self._records.clear()
        logger.info(f"FileRecordStore closed (path={self.base_path})")
