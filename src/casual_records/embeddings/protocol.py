"""
Text embedding protocol for casual-records.

Provides a unified interface for turning text into fixed-length vectors
for similarity search.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class TextEmbedding(Protocol):
    """
    Protocol for text embedding providers.

    All implementations must:

    1. Return deterministic vectors for the same input
    2. Return vectors of exactly `dimension` elements
    3. L2-normalize non-zero vectors so cosine similarity is a dot product

    Example:
        >>> embedder = HashingEmbedding(dimension=100)
        >>> vector = embedder.embed_document("Dental visit with Dr. Smith")
        >>> len(vector) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> int:
        """
        Vector dimension produced by this embedder.

        A vector index keeps this constant for its whole lifetime.
        """
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the embedding scheme (e.g., "hashing-tf-100")."""
        ...

    def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for a document to be stored.

        Args:
            text: Document text to embed

        Returns:
            Embedding vector (zero vector for empty or degenerate input)
        """
        ...

    def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding for a search query.

        Args:
            text: Query text to embed

        Returns:
            Embedding vector (zero vector for empty or degenerate input)
        """
        ...

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple documents.

        Args:
            texts: List of document texts

        Returns:
            List of embedding vectors (same order as input)
        """
        ...
