"""Common constants used across the application."""

from typing import Dict, Type

from .exceptions import (
    ChunkTooLargeError,
    DomainError,
    EmbeddingGenerationError,
    StoreDeleteError,
    StoreWriteError,
    ValidationError,
)

# Whether an orchestrator may retry the failed step. Most specific class wins.
RETRY_POLICY: Dict[Type[DomainError], bool] = {
    ChunkTooLargeError: False,
    ValidationError: False,
    EmbeddingGenerationError: True,
    StoreWriteError: True,
    StoreDeleteError: True,
}

SOURCE_TEXT = "text"
SOURCE_CRAWL = "crawl"
SOURCE_FILE = "file"
PAGE_SOURCE_TEMPLATE = "page_{page_number}"
