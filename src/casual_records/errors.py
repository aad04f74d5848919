"""
Exception hierarchy for casual-records.

All errors derive from RecordError so callers can catch the whole family.
"""

from typing import Optional


class RecordError(Exception):
    """Base class for all casual-records errors."""


class NotFoundError(RecordError, LookupError):
    """Raised when a record or embedding id does not exist."""

    def __init__(self, record_id: str, what: str = "record"):
        self.record_id = record_id
        super().__init__(f"{what} not found: {record_id}")


class ValidationError(RecordError, ValueError):
    """Raised when a record is rejected before any mutation happens."""


class DuplicateRecordError(ValidationError):
    """Raised when storing a record whose id already exists."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"record already exists: {record_id}")


class StorageIOError(RecordError):
    """Raised when the durable record store fails to read or write."""


class VectorIndexError(RecordError):
    """Raised when the vector index fails to store or search embeddings."""


class ExtractionError(RecordError):
    """Raised when a content extractor cannot produce a record."""


class ScrapeError(RecordError):
    """Raised (or reported) when a source cannot be scraped."""

    def __init__(self, message: str, path: Optional[str] = None, fatal: bool = False):
        self.path = path
        self.fatal = fatal
        super().__init__(message)


class IngestError(RecordError):
    """
    Raised when an upsert or delete fails part way.

    The stage identifies which resource failed so the caller can decide
    whether to retry the ingest or run a reindex sweep.
    """

    def __init__(self, record_id: str, stage: str, message: str):
        self.record_id = record_id
        self.stage = stage
        super().__init__(f"{stage} failed for record {record_id}: {message}")
