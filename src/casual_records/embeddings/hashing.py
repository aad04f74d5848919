"""Hashed term-frequency embedding for casual-records."""

import logging
import math
import re
from collections import Counter
from typing import Dict, List

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 100
MIN_TERM_LENGTH = 3

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def tokenize(text: str) -> List[str]:
    """Lower-case text and split on anything that is not a-z or 0-9."""
    return [token for token in _TOKEN_SPLIT.split(text.lower()) if token]


def term_frequencies(text: str) -> Dict[str, float]:
    """
    Compute normalized term frequencies for text.

    Tokens shorter than MIN_TERM_LENGTH are dropped, but they still count
    towards the total used for normalization.
    """
    tokens = tokenize(text)
    if not tokens:
        return {}

    counts = Counter(token for token in tokens if len(token) >= MIN_TERM_LENGTH)
    total = float(len(tokens))
    return {term: count / total for term, count in counts.items()}


def stable_hash(term: str) -> int:
    """32-bit polynomial hash (multiplier 31) over the UTF-8 bytes of term."""
    value = 0
    for byte in term.encode("utf-8"):
        value = (value * 31 + byte) & 0xFFFFFFFF
    return value


class HashingEmbedding:
    """
    Deterministic bag-of-words embedding.

    Each term's normalized frequency is accumulated into slot
    ``stable_hash(term) % dimension`` and the vector is L2-normalized.
    Unrelated terms that land in the same slot are merged; this is an
    accepted approximation of the scheme.

    Example:
        >>> embedder = HashingEmbedding()
        >>> vector = embedder.embed_document("Dental cleaning receipt")
        >>> len(vector)
        100
        >>> any(embedder.embed_document(""))
        False
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        """
        Initialize the embedder.

        Args:
            dimension: Length of produced vectors (default: 100)

        Raises:
            ValueError: If dimension is not positive
        """
        if dimension <= 0:
            raise ValueError(f"Embedding dimension must be positive, got {dimension}")

        self._dimension = dimension
        logger.info(f"HashingEmbedding initialized ({dimension} dimensions)")

    @property
    def dimension(self) -> int:
        """Vector dimension produced by this embedder."""
        return self._dimension

    @property
    def model_name(self) -> str:
        """Identifier of the embedding scheme."""
        return f"hashing-tf-{self._dimension}"

    def _embed(self, text: str) -> List[float]:
        vector = [0.0] * self._dimension

        for term, frequency in term_frequencies(text).items():
            vector[stable_hash(term) % self._dimension] += frequency

        magnitude = math.sqrt(sum(value * value for value in vector))
        if magnitude == 0:
            return vector

        return [value / magnitude for value in vector]

    def embed_document(self, text: str) -> List[float]:
        """Generate embedding for a document to be stored."""
        return self._embed(text)

    def embed_query(self, text: str) -> List[float]:
        """Generate embedding for a search query (same scheme as documents)."""
        return self._embed(text)

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for multiple documents."""
        return [self._embed(text) for text in texts]
