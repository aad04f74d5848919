"""
Record discovery: free-text search with metadata filters.

Ranking is delegated to the vector index when one is configured. Without an
index, records are scored by plain keyword containment over their title,
description and content.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from casual_records.models import Record, SearchResult
from casual_records.storage.protocols import RecordStore, VectorIndex
from casual_records.storage.vector.memory import rank_results

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 0.5
DESCRIPTION_WEIGHT = 0.3
CONTENT_WEIGHT = 0.2


def keyword_score(record: Record, query: str) -> float:
    """
    Score a record by case-insensitive containment of the whole query.

    A match in the title counts more than one in the description, which
    counts more than one in the content. The weights sum to 1.0.
    """
    needle = query.strip().lower()
    if not needle:
        return 0.0

    score = 0.0
    if record.title and needle in record.title.lower():
        score += TITLE_WEIGHT
    if record.description and needle in record.description.lower():
        score += DESCRIPTION_WEIGHT
    if record.content and needle in record.content.lower():
        score += CONTENT_WEIGHT
    return min(score, 1.0)


def matches_filters(record: Record, filters: Optional[Dict[str, Any]]) -> bool:
    """
    Check a record against conjunctive filters.

    "type" matches the record type exactly, "tag" requires membership in the
    tag set, and any other key must equal the metadata value under that key.
    """
    if not filters:
        return True

    for key, value in filters.items():
        if key == "type":
            if record.type != value:
                return False
        elif key == "tag":
            if value not in record.tags:
                return False
        elif key not in record.metadata or record.metadata[key] != value:
            return False

    return True


class RecordDiscovery:
    """
    Query-time search over records.

    Example:
        discovery = RecordDiscovery(record_store, vector_index)
        results = await discovery.search("dentist", filters={"type": "health_visit"}, limit=5)
    """

    def __init__(self, record_store: RecordStore, vector_index: Optional[VectorIndex] = None):
        """
        Initialize discovery.

        Args:
            record_store: Store used by the keyword fallback
            vector_index: Index used for ranking (None = keyword fallback)
        """
        self.record_store = record_store
        self.vector_index = vector_index

        mode = "vector" if vector_index is not None else "keyword"
        logger.info(f"RecordDiscovery initialized (mode={mode})")

    async def search(
        self,
        query: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 10,
    ) -> List[SearchResult]:
        """
        Rank records against a query, filter them, then truncate.

        Args:
            query: Free-text query
            filters: Conjunctive filters ("type", "tag" or metadata keys)
            limit: Maximum number of results (<= 0 means unlimited)

        Returns:
            Results sorted by descending score, ties by ascending record id
        """
        if self.vector_index is not None:
            # rank everything so filtering cannot starve the limit
            results = await asyncio.to_thread(self.vector_index.search, query, 0)
        else:
            results = await asyncio.to_thread(self._keyword_search, query)

        if filters:
            results = [result for result in results if matches_filters(result.record, filters)]

        if limit > 0:
            results = results[:limit]

        logger.info(f"{len(results)} records found for query {query!r}")
        return results

    def _keyword_search(self, query: str) -> List[SearchResult]:
        results = []
        for record in self.record_store.list():
            score = keyword_score(record, query)
            if score > 0:
                results.append(SearchResult(record=record, score=score))
        return rank_results(results, 0)
