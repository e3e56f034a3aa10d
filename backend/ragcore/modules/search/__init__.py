"""Similarity search module for RAG retrieval."""

from .services import SimilaritySearchService

__all__ = ["SimilaritySearchService"]
