"""
Text embedding abstractions for casual-records.

Provides the embedding protocol and the deterministic hashed
term-frequency embedder used by the vector indexes.
"""

from casual_records.embeddings.hashing import (
    DEFAULT_DIMENSION,
    HashingEmbedding,
    stable_hash,
    term_frequencies,
    tokenize,
)
from casual_records.embeddings.protocol import TextEmbedding

__all__ = [
    "TextEmbedding",
    "HashingEmbedding",
    "DEFAULT_DIMENSION",
    "stable_hash",
    "term_frequencies",
    "tokenize",
]
