"""Schemas for ingestion inputs and results."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class OCRPage(BaseModel):
    """One page of OCR output."""

    page_number: int = Field(ge=0)
    markdown: str = Field(default="", description="Extracted page text")


class CrawlPage(OCRPage):
    """One crawled page; its metadata is copied onto every chunk of the page."""

    metadata: Dict[str, Any] = Field(default_factory=dict, description="url, title, crawled_from, ...")


class IngestionResult(BaseModel):
    """Counters for one ingestion call."""

    model_config = ConfigDict(validate_assignment=True)

    chunks_created: int = 0
    embeddings_stored: int = 0
    chunks_skipped: int = 0
    pages_processed: int = 0
    file_id: Optional[str] = None
