"""Chunking module: token-budgeted text segmentation."""

from .schemas import ChunkingConfig, TextChunk
from .services import ChunkingService

__all__ = ["ChunkingConfig", "ChunkingService", "TextChunk"]
