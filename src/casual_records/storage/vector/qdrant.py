import logging
import uuid
from typing import List, Optional

from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointIdsList, PointStruct, VectorParams

from casual_records.embeddings import HashingEmbedding, TextEmbedding
from casual_records.errors import NotFoundError, ValidationError, VectorIndexError
from casual_records.models import Record, SearchResult
from casual_records.storage.vector.memory import rank_results

logger = logging.getLogger(__name__)


def point_id(record_id: str) -> str:
    """Qdrant only accepts UUIDs or integers as point ids."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"casual-records:{record_id}"))


class QdrantVectorIndex:
    def __init__(
        self,
        client: Optional[QdrantClient] = None,
        collection_name: str = "records",
        embedding: Optional[TextEmbedding] = None,
    ):
        """
        Initialize Qdrant vector index.

        Args:
            client: Qdrant client (default: in-process ``QdrantClient(":memory:")``)
            collection_name: Collection name (default: records)
            embedding: Embedder for records and queries (default: HashingEmbedding)
        """
        self.client = client or QdrantClient(":memory:")
        self.collection_name = collection_name
        self.embedding = embedding or HashingEmbedding()
        self._init_collection()

        logger.info(
            f"QdrantVectorIndex initialized (collection={collection_name}, "
            f"model={self.embedding.model_name})"
        )

    def _init_collection(self):
        if not self.client.collection_exists(self.collection_name):
            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(size=self.embedding.dimension, distance=Distance.COSINE),
            )

    def index(self, record: Record) -> None:
        """Embed a record and upsert it as a point keyed by its id."""
        if not record.id:
            raise ValidationError("record ID is required")

        vector = self.embedding.embed_document(record.searchable_text())
        payload = {"record_id": record.id, "record": record.model_dump(mode="json")}

        try:
            self.client.upsert(
                collection_name=self.collection_name,
                points=[PointStruct(id=point_id(record.id), vector=vector, payload=payload)],
            )
        except Exception as e:
            logger.error(f"Failed to index record {record.id}: {e}")
            raise VectorIndexError(f"failed to index record {record.id}: {e}") from e

        logger.debug(f"Indexed record {record.id}")

    def search(self, query: str, limit: int = 10) -> List[SearchResult]:
        """Rank indexed records against the query."""
        query_vector = self.embedding.embed_query(query)
        if not any(query_vector):
            return []

        total = self.count()
        if total == 0:
            return []

        try:
            response = self.client.query_points(
                collection_name=self.collection_name,
                query=query_vector,
                limit=total,
                with_payload=True,
            )
        except Exception as e:
            logger.error(f"Qdrant search failed: {e}")
            raise VectorIndexError(f"search failed: {e}") from e

        results = [
            SearchResult(
                record=Record.model_validate(point.payload["record"]),
                score=min(point.score, 1.0),
            )
            for point in response.points
            if point.score > 0
        ]

        ranked = rank_results(results, limit)
        logger.debug(f"{len(ranked)} results found for query '{query[:50]}'")
        return ranked

    def delete(self, record_id: str) -> None:
        """Delete a record's point; missing ids are an error."""
        pid = point_id(record_id)
        if not self.client.retrieve(collection_name=self.collection_name, ids=[pid]):
            raise NotFoundError(record_id, what="embedding")

        try:
            self.client.delete(
                collection_name=self.collection_name,
                points_selector=PointIdsList(points=[pid]),
            )
        except Exception as e:
            logger.error(f"Failed to delete embedding {record_id}: {e}")
            raise VectorIndexError(f"failed to delete embedding {record_id}: {e}") from e

        logger.debug(f"Deleted embedding {record_id}")

    def __contains__(self, record_id: str) -> bool:
        return bool(
            self.client.retrieve(collection_name=self.collection_name, ids=[point_id(record_id)])
        )

    def count(self) -> int:
        return self.client.count(collection_name=self.collection_name, exact=True).count

    def clear(self) -> None:
        """Clear ALL embeddings from the collection (dangerous!)"""
        self.client.delete_collection(collection_name=self.collection_name)
        self._init_collection()

    def close(self) -> None:
        self.client.close()
