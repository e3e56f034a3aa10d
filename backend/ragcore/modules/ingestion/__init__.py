"""Ingestion module: chunk, embed and store text for a widget."""

from .schemas import CrawlPage, IngestionResult, OCRPage
from .services import IngestionService

__all__ = ["IngestionService", "IngestionResult", "OCRPage", "CrawlPage"]
