"""
Unit tests for SQLAlchemy record storage.

Uses in-memory SQLite; the same code runs against PostgreSQL or MySQL.
"""

import threading
from datetime import datetime

import pytest
from sqlalchemy import create_engine, inspect

from casual_records.errors import StorageIOError
from casual_records.models import Record
from casual_records.storage.records.sqlalchemy import (
    SQLAlchemyRecordStore,
    create_record_engine,
)


@pytest.fixture
def record_store():
    """Create a fresh SQLAlchemy record store with in-memory SQLite."""
    store = SQLAlchemyRecordStore.from_url("sqlite:///:memory:")
    yield store
    store.close()


def test_schema_and_indexes(record_store):
    """The records table has the documented columns and secondary indexes."""
    inspector = inspect(record_store.engine)

    columns = {column["name"] for column in inspector.get_columns("records")}
    assert {"id", "type", "content", "metadata", "created_at", "updated_at"} <= columns

    indexes = {index["name"] for index in inspector.get_indexes("records")}
    assert {"idx_records_type", "idx_records_created_at"} <= indexes


def test_metadata_and_tags_json_encoded(record_store):
    """Metadata and tags survive the JSON text columns."""
    record = Record(
        id="r1",
        type="insurance",
        content="Policy 123",
        metadata={"insurer": "Acme", "premium": 42.0, "nested": {"a": [1, 2]}},
        tags=["car", "annual"],
    )
    record_store.store(record)

    fetched = record_store.get("r1")
    assert fetched.metadata == record.metadata
    assert fetched.tags == ["car", "annual"]


def test_list_newest_first(record_store):
    """List orders by created_at descending."""
    record_store.store(Record(id="old", content="x", created_at=datetime(2023, 1, 1)))
    record_store.store(Record(id="new", content="y", created_at=datetime(2024, 1, 1)))
    record_store.store(Record(id="mid", content="z", created_at=datetime(2023, 6, 1)))

    assert [r.id for r in record_store.list()] == ["new", "mid", "old"]


def test_file_database_persists(tmp_path):
    """A file database keeps records across store instances."""
    url = f"sqlite:///{tmp_path / 'nested' / 'records.db'}"

    first = SQLAlchemyRecordStore.from_url(url)
    first.store(Record(id="r1", type="visa", content="Residence permit"))
    first.close()

    second = SQLAlchemyRecordStore.from_url(url)
    assert second.get("r1").type == "visa"
    second.close()


def test_usable_from_worker_threads(record_store):
    """The in-memory engine is shared safely across threads."""
    errors = []

    def worker(index: int):
        try:
            record_store.store(Record(id=f"r{index}", content=f"content {index}"))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert errors == []
    assert len(record_store.list()) == 5


def test_missing_tables_raise_storage_error():
    """Database errors surface as StorageIOError."""
    store = SQLAlchemyRecordStore(create_record_engine("sqlite:///:memory:"))

    with pytest.raises(StorageIOError):
        store.get("r1")


def test_accepts_plain_engine():
    """Stores can be built from an existing engine."""
    engine = create_engine("sqlite:///:memory:")
    store = SQLAlchemyRecordStore(engine)
    store.create_tables()

    store.store(Record(id="r1", content="x"))
    assert store.get("r1").content == "x"
