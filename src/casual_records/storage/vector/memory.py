"""
In-memory vector index implementation.

Keeps one embedding per record id in a dict and ranks records by cosine
similarity. The index is a derived cache of the record store: it is rebuilt
from the store on startup and lost on restart.
"""

import logging
import math
from typing import Dict, List, Optional

from casual_records.embeddings import HashingEmbedding, TextEmbedding
from casual_records.errors import NotFoundError, ValidationError
from casual_records.models import Record, SearchResult
from casual_records.storage.locking import ReadWriteLock
from casual_records.storage.vector.models import Embedding

logger = logging.getLogger(__name__)


def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
    """
    Calculate cosine similarity between two vectors.

    Returns 0.0 when either vector has zero magnitude or the lengths differ.
    """
    if len(vec1) != len(vec2):
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    magnitude1 = math.sqrt(sum(a * a for a in vec1))
    magnitude2 = math.sqrt(sum(b * b for b in vec2))

    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)


def rank_results(results: List[SearchResult], limit: int) -> List[SearchResult]:
    """Sort by descending score, ties by ascending record id, then truncate."""
    ranked = sorted(results, key=lambda result: (-result.score, result.record.id))
    if limit > 0:
        ranked = ranked[:limit]
    return ranked


class InMemoryVectorIndex:
    """
    In-memory implementation of the VectorIndex protocol.

    Example:
        index = InMemoryVectorIndex()
        index.index(Record(id="r1", content="Annual physical with Dr. Lee"))
        index.search("physical", limit=5)
    """

    def __init__(self, embedding: Optional[TextEmbedding] = None):
        """
        Initialize the index.

        Args:
            embedding: Embedder for records and queries (default: HashingEmbedding)
        """
        self.embedding = embedding or HashingEmbedding()
        self._embeddings: Dict[str, Embedding] = {}
        self._lock = ReadWriteLock()

        logger.info(f"InMemoryVectorIndex initialized (model={self.embedding.model_name})")

    @property
    def dimension(self) -> int:
        return self.embedding.dimension

    def index(self, record: Record) -> None:
        """Embed a record and store or replace its embedding."""
        if not record.id:
            raise ValidationError("record ID is required")

        vector = self.embedding.embed_document(record.searchable_text())
        entry = Embedding(record_id=record.id, vector=vector, record=record.model_copy(deep=True))

        with self._lock.write():
            self._embeddings[record.id] = entry

        logger.debug(f"Indexed record {record.id}")

    def search(self, query: str, limit: int = 10) -> List[SearchResult]:
        """Search for records by cosine similarity to the query."""
        with self._lock.read():
            entries = list(self._embeddings.values())

        if not entries:
            return []

        query_vector = self.embedding.embed_query(query)

        results = []
        for entry in entries:
            score = cosine_similarity(query_vector, entry.vector)
            if score > 0:
                results.append(
                    SearchResult(record=entry.record.model_copy(deep=True), score=min(score, 1.0))
                )

        ranked = rank_results(results, limit)
        logger.debug(f"{len(ranked)} results found for query '{query[:50]}'")
        return ranked

    def delete(self, record_id: str) -> None:
        """Remove a record's embedding."""
        with self._lock.write():
            if record_id not in self._embeddings:
                raise NotFoundError(record_id, what="embedding")
            del self._embeddings[record_id]

        logger.debug(f"Deleted embedding {record_id}")

    def get(self, record_id: str) -> Embedding:
        """Retrieve the embedding stored for a record."""
        with self._lock.read():
            entry = self._embeddings.get(record_id)
            if entry is None:
                raise NotFoundError(record_id, what="embedding")
            return entry.model_copy(deep=True)

    def __contains__(self, record_id: str) -> bool:
        with self._lock.read():
            return record_id in self._embeddings

    def count(self) -> int:
        """Number of indexed records."""
        with self._lock.read():
            return len(self._embeddings)

    def clear(self) -> None:
        """Clear ALL embeddings from the index."""
        with self._lock.write():
            count = len(self._embeddings)
            self._embeddings.clear()
        logger.info(f"Cleared all embeddings ({count} total)")

    def close(self) -> None:
        """Release the embeddings."""
        self.clear()
