"""Embedding infrastructure for text-to-vector conversion."""

from .base import EmbeddingProvider
from .service import EmbeddingGenerator, create_embedding_provider, get_embedding_generator

__all__ = ["EmbeddingProvider", "EmbeddingGenerator", "create_embedding_provider", "get_embedding_generator"]
