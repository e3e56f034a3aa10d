"""Chunk, embed, store and retrieve core for widget knowledge bases."""

__version__ = "0.1.0"
