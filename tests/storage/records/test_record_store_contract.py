"""
Contract tests run against every RecordStore backend.

Covers store/get round trips, duplicate rejection, type filtering,
update and delete semantics.
"""

from datetime import datetime, timedelta

import pytest

from casual_records.errors import DuplicateRecordError, NotFoundError, ValidationError
from casual_records.models import Record
from casual_records.storage import FileRecordStore, InMemoryRecordStore
from casual_records.storage.records.sqlalchemy import SQLAlchemyRecordStore


@pytest.fixture(params=["memory", "file", "sqlalchemy"])
def record_store(request, tmp_path):
    """A fresh store for each backend."""
    if request.param == "memory":
        store = InMemoryRecordStore()
    elif request.param == "file":
        store = FileRecordStore(tmp_path / "records")
    else:
        store = SQLAlchemyRecordStore.from_url("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def receipt():
    """A fully populated receipt record."""
    return Record(
        id="rec-1",
        type="receipt",
        content="Grocery receipt: bread, eggs. Total 12.50",
        title="Grocery receipt",
        description="Weekly shopping",
        metadata={"vendor": "Corner Shop", "amount": 12.5, "items": ["bread", "eggs"]},
        tags=["groceries", "2024"],
        created_at=datetime(2024, 3, 1, 9, 30),
        updated_at=datetime(2024, 3, 1, 9, 30),
    )


def test_store_then_get_round_trip(record_store, receipt):
    """Get returns the stored record equal in all fields except updated_at."""
    stored = record_store.store(receipt)
    fetched = record_store.get(receipt.id)

    assert fetched.model_dump(exclude={"updated_at"}) == receipt.model_dump(exclude={"updated_at"})
    assert fetched.updated_at >= receipt.updated_at
    assert stored.id == receipt.id


def test_store_rejects_duplicate_id(record_store, receipt):
    """Storing an existing id is an error, not an overwrite."""
    record_store.store(receipt)

    with pytest.raises(DuplicateRecordError):
        record_store.store(receipt.model_copy(update={"content": "other"}))

    assert record_store.get(receipt.id).content == receipt.content


def test_store_requires_id(record_store):
    """Records without an id are rejected."""
    with pytest.raises(ValidationError):
        record_store.store(Record(id="", content="no id"))


def test_get_missing_raises_not_found(record_store):
    """Missing ids raise NotFoundError."""
    with pytest.raises(NotFoundError):
        record_store.get("missing")


def test_list_filters_by_exact_type(record_store):
    """List(type=T) returns exactly the records of type T."""
    record_store.store(Record(id="r1", type="receipt", content="bread"))
    record_store.store(Record(id="r2", type="receipt", content="eggs"))
    record_store.store(Record(id="v1", type="health_visit", content="dentist"))

    receipts = record_store.list("receipt")
    visits = record_store.list("health_visit")

    assert sorted(r.id for r in receipts) == ["r1", "r2"]
    assert [r.id for r in visits] == ["v1"]
    assert record_store.list("tax") == []
    assert len(record_store.list()) == 3
    assert len(record_store.list("")) == 3


def test_update_replaces_and_keeps_created_at(record_store, receipt):
    """Update fully replaces content but keeps the original created_at."""
    record_store.store(receipt)

    replacement = receipt.model_copy(
        update={
            "content": "Corrected total 13.00",
            "tags": ["groceries"],
            "created_at": receipt.created_at + timedelta(days=10),
        }
    )
    record_store.update(replacement)
    fetched = record_store.get(receipt.id)

    assert fetched.content == "Corrected total 13.00"
    assert fetched.tags == ["groceries"]
    assert fetched.created_at == receipt.created_at


def test_update_missing_raises_not_found(record_store, receipt):
    """Update never creates records."""
    with pytest.raises(NotFoundError):
        record_store.update(receipt)


def test_delete_then_get_not_found(record_store, receipt):
    """Delete followed by Get returns NotFound."""
    record_store.store(receipt)
    record_store.delete(receipt.id)

    with pytest.raises(NotFoundError):
        record_store.get(receipt.id)
    assert record_store.list() == []


def test_delete_missing_raises_not_found(record_store):
    """Deleting an unknown id is an error, not a no-op."""
    with pytest.raises(NotFoundError):
        record_store.delete("missing")


def test_returned_records_are_copies(record_store, receipt):
    """Mutating a returned record does not change stored state."""
    record_store.store(receipt)

    fetched = record_store.get(receipt.id)
    fetched.tags.append("mutated")
    fetched.metadata["vendor"] = "changed"

    again = record_store.get(receipt.id)
    assert "mutated" not in again.tags
    assert again.metadata["vendor"] == "Corner Shop"
