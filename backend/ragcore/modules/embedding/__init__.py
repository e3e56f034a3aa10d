"""Embedding storage module: persisted chunk vectors scoped to widgets and files."""

from .schemas import EmbeddingMetadata, EmbeddingRecordCreate, SearchResult, StoredVector
from .services import EmbeddingBatchWriter, EmbeddingStoreService

__all__ = [
    "EmbeddingStoreService",
    "EmbeddingBatchWriter",
    "EmbeddingMetadata",
    "EmbeddingRecordCreate",
    "SearchResult",
    "StoredVector",
]
