"""
Record ingestor.

Keeps the record store and the vector index describing the same logical
records. The store is the source of truth and the index is a derived cache:
upserts write the store first and the index second, and reindex() rebuilds
the whole index from the store.

Writes are not atomic across the two resources. A failure is raised as an
IngestError naming the stage that failed; retrying the ingest or running
reindex() repairs the index.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, TypeVar

from casual_records.errors import IngestError, NotFoundError, ValidationError
from casual_records.models import RECORD_TYPES, Record
from casual_records.storage.protocols import RecordStore, VectorIndex

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def _in_thread(func: Callable[..., T], *args: Any) -> T:
    """
    Run a blocking store/index call in a worker thread.

    A worker thread cannot be interrupted, so on cancellation this waits for
    the call to return before re-raising. Callers holding the write lock keep
    it until the resource is no longer being touched.
    """
    task = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        while not task.done():
            try:
                await asyncio.wait([task])
            except asyncio.CancelledError:
                continue
        raise


def validate_record(record: Record) -> None:
    """
    Reject records that are missing an id, a known type or content.

    Raises:
        ValidationError: Before anything is written
    """
    if not record.id or not record.id.strip():
        raise ValidationError("record ID is required")
    if record.type not in RECORD_TYPES:
        raise ValidationError(f"record {record.id} has unknown type: {record.type!r}")
    if not record.content or not record.content.strip():
        raise ValidationError(f"record {record.id} has no content")


class RecordIngestor:
    """
    Upserts and deletes records across the record store and the vector index.

    Mutations are serialized with an asyncio lock so that two upserts of the
    same id cannot interleave their delete/store/index steps. Every store and
    index call runs in a worker thread; cancelling the caller lets the running
    stage finish under the lock, then stops before the next one.
    """

    def __init__(self, record_store: RecordStore, vector_index: VectorIndex):
        """
        Initialize the ingestor.

        Args:
            record_store: Durable record store (source of truth)
            vector_index: Embedding index kept in sync with the store
        """
        self.record_store = record_store
        self.vector_index = vector_index
        self._write_lock = asyncio.Lock()

        logger.info("RecordIngestor initialized")

    async def ingest(self, record: Record) -> Record:
        """
        Insert or replace a record and its embedding.

        An existing record with the same id is deleted from the store and the
        index first; its created_at is carried over to the replacement.

        Args:
            record: Record to upsert

        Returns:
            The record as stored

        Raises:
            ValidationError: If id, type or content is missing (nothing written)
            IngestError: If a stage failed; ``stage`` is one of "lookup",
                "delete_existing", "store" or "index"
        """
        validate_record(record)

        async with self._write_lock:
            existing = await self._lookup(record.id)

            if existing is not None:
                await self._remove_existing(record.id)
                record = record.model_copy(update={"created_at": existing.created_at})

            try:
                stored = await _in_thread(self.record_store.store, record)
            except Exception as e:
                logger.error(f"Failed to store record {record.id}: {e}")
                raise IngestError(record.id, "store", str(e)) from e

            try:
                await _in_thread(self.vector_index.index, stored)
            except Exception as e:
                # store succeeded: the record is unindexed until a re-ingest or reindex
                logger.error(f"Failed to index record {record.id}: {e}")
                raise IngestError(record.id, "index", str(e)) from e

        action = "replaced" if existing is not None else "added"
        logger.debug(f"Record {action}: id={stored.id}, type={stored.type}")
        return stored

    async def delete(self, record_id: str) -> None:
        """
        Delete a record from the store, then its embedding from the index.

        Raises:
            ValidationError: If the id is empty
            NotFoundError: If the store has no record with this id
            IngestError: If a stage failed; ``stage`` is "delete_store" or
                "delete_index" (the store delete is not rolled back)
        """
        if not record_id or not record_id.strip():
            raise ValidationError("record ID is required")

        async with self._write_lock:
            try:
                await _in_thread(self.record_store.delete, record_id)
            except NotFoundError:
                raise
            except Exception as e:
                logger.error(f"Failed to delete record {record_id}: {e}")
                raise IngestError(record_id, "delete_store", str(e)) from e

            try:
                await _in_thread(self.vector_index.delete, record_id)
            except NotFoundError:
                logger.debug(f"No embedding to delete for record {record_id}")
            except Exception as e:
                logger.error(f"Record {record_id} deleted but its embedding was not: {e}")
                raise IngestError(record_id, "delete_index", str(e)) from e

        logger.debug(f"Record deleted: id={record_id}")

    async def reindex(self) -> int:
        """
        Rebuild the vector index from the record store.

        After this returns, every stored record has exactly one embedding
        and the index holds nothing else.

        Returns:
            Number of records indexed

        Raises:
            IngestError: With stage "index" if a record could not be indexed
        """
        async with self._write_lock:
            records = await _in_thread(self.record_store.list)
            await _in_thread(self.vector_index.clear)

            for record in records:
                try:
                    await _in_thread(self.vector_index.index, record)
                except Exception as e:
                    logger.error(f"Failed to index record {record.id} during reindex: {e}")
                    raise IngestError(record.id, "index", str(e)) from e

        logger.info(f"Reindexed {len(records)} records")
        return len(records)

    async def _lookup(self, record_id: str) -> Optional[Record]:
        try:
            return await _in_thread(self.record_store.get, record_id)
        except NotFoundError:
            return None
        except Exception as e:
            logger.error(f"Failed to look up record {record_id}: {e}")
            raise IngestError(record_id, "lookup", str(e)) from e

    async def _remove_existing(self, record_id: str) -> None:
        try:
            await _in_thread(self.record_store.delete, record_id)
        except NotFoundError:
            pass
        except Exception as e:
            logger.error(f"Failed to remove existing record {record_id}: {e}")
            raise IngestError(record_id, "delete_existing", str(e)) from e

        try:
            await _in_thread(self.vector_index.delete, record_id)
        except NotFoundError:
            # a previous ingest may have failed before indexing
            logger.debug(f"Existing record {record_id} had no embedding")
        except Exception as e:
            logger.error(f"Failed to remove existing embedding {record_id}: {e}")
            raise IngestError(record_id, "delete_existing", str(e)) from e
