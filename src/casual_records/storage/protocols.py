"""
Storage protocol definitions for records and their embeddings.

These protocols define the interface that storage implementations must provide.
They are implementation-agnostic: records can live in memory, in JSON files or
in any SQLAlchemy database, and embeddings in memory or in Qdrant. Backends are
chosen at construction time and injected into the services.
"""

from typing import List, Optional, Protocol

from casual_records.models import Record, SearchResult


class RecordStore(Protocol):
    """
    Protocol for durable keyed record storage.

    The record store is the single source of truth. Every mutating call must
    be persisted before it returns, and reads must observe the latest
    committed state.
    """

    def store(self, record: Record) -> Record:
        """
        Persist a new record.

        Args:
            record: The record to store (id must be non-empty)

        Returns:
            The stored record, with updated_at bumped

        Raises:
            ValidationError: If the id is empty
            DuplicateRecordError: If a record with this id already exists
            StorageIOError: If the backend fails to write
        """
        ...

    def get(self, record_id: str) -> Record:
        """
        Retrieve a record by ID.

        Raises:
            NotFoundError: If no record has this id
        """
        ...

    def list(self, record_type: Optional[str] = None) -> List[Record]:
        """
        List all records, optionally restricted to exactly one type.

        Args:
            record_type: Type to filter on (None or "" for all records)

        Returns:
            Matching records (ordering is backend-defined)
        """
        ...

    def update(self, record: Record) -> Record:
        """
        Fully replace an existing record.

        Raises:
            NotFoundError: If the id does not already exist
        """
        ...

    def delete(self, record_id: str) -> None:
        """
        Remove a record.

        Raises:
            NotFoundError: If the id does not already exist
        """
        ...

    def close(self) -> None:
        """Release backend resources."""
        ...


class VectorIndex(Protocol):
    """
    Protocol for record-id keyed embedding indexes.

    Indexes embed a record's searchable text and rank records by cosine
    similarity against an embedded query.
    """

    def index(self, record: Record) -> None:
        """
        Embed a record and store (or fully replace) its embedding.

        Raises:
            ValidationError: If the record id is empty
        """
        ...

    def search(self, query: str, limit: int = 10) -> List[SearchResult]:
        """
        Rank indexed records against a query.

        Args:
            query: Free-text query
            limit: Maximum number of results (<= 0 means unlimited)

        Returns:
            Results with positive scores, sorted by descending score and
            ascending record id on ties
        """
        ...

    def delete(self, record_id: str) -> None:
        """
        Remove a record's embedding.

        Raises:
            NotFoundError: If no embedding exists for the id
        """
        ...

    def count(self) -> int:
        """Number of indexed records."""
        ...

    def clear(self) -> None:
        """Remove all embeddings."""
        ...

    def close(self) -> None:
        """Release index resources."""
        ...
