"""
casual-records: Personal document records with classification, hashed-vector search and scraping.

Core components:
- models: Record, SearchResult and the fixed record type set
- storage: Record store and vector index protocols with memory, file, SQLAlchemy and Qdrant backends
- embeddings: Deterministic hashed term-frequency embedding
- ingestion: Upserts that keep the store and index in sync, scrape-and-ingest runs
- sources: Scrape sources (local directories) streaming records
- extractors: OCR content extraction and LLM type classification
- discovery: Free-text search with metadata filters
"""

__version__ = "0.1.0"

from casual_records.errors import (
    DuplicateRecordError,
    ExtractionError,
    IngestError,
    NotFoundError,
    RecordError,
    ScrapeError,
    StorageIOError,
    ValidationError,
    VectorIndexError,
)
from casual_records.models import RECORD_TYPES, Record, RecordType, SearchResult
from casual_records.record_service import RecordService

__all__ = [
    "__version__",
    # Models
    "Record",
    "RecordType",
    "RECORD_TYPES",
    "SearchResult",
    "RecordService",
    # Errors
    "RecordError",
    "NotFoundError",
    "ValidationError",
    "DuplicateRecordError",
    "StorageIOError",
    "VectorIndexError",
    "ExtractionError",
    "ScrapeError",
    "IngestError",
]
