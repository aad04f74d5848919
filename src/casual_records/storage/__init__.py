"""
Storage protocols and backends for records and embeddings.

Provides protocol definitions for storage backends. Implementations can use
various databases (SQLite, PostgreSQL, JSON files, Qdrant, in-memory, etc.)
as long as they satisfy the protocol interface.
"""

from casual_records.storage.protocols import RecordStore, VectorIndex

__all__ = [
    "RecordStore",
    "VectorIndex",
]

# Record storage implementations
from casual_records.storage.records.file import FileRecordStore  # noqa: E402
from casual_records.storage.records.memory import InMemoryRecordStore  # noqa: E402

__all__.extend(["FileRecordStore", "InMemoryRecordStore"])

try:
    from casual_records.storage.records.sqlalchemy import SQLAlchemyRecordStore  # noqa: F401

    __all__.append("SQLAlchemyRecordStore")
except ImportError:
    pass

# Vector index implementations
from casual_records.storage.vector.memory import InMemoryVectorIndex  # noqa: E402

__all__.append("InMemoryVectorIndex")

try:
    from casual_records.storage.vector.qdrant import QdrantVectorIndex  # noqa: F401

    __all__.append("QdrantVectorIndex")
except ImportError:
    pass
