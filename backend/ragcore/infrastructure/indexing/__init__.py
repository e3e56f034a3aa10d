"""Vector indexing infrastructure used to rank stored embeddings."""

from .base import IndexedVector, IndexType, ScoredVector, VectorIndex
from .linear_search import LinearSearchIndex

__all__ = [
    "VectorIndex",
    "IndexType",
    "IndexedVector",
    "ScoredVector",
    "LinearSearchIndex",
]
