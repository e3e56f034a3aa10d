"""Pydantic schemas for stored embeddings and search results."""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmbeddingMetadata(BaseModel):
    """Metadata stored with each embedded chunk.

    Keys supplied by ingesting collaborators beyond the known ones are kept.
    """

    model_config = ConfigDict(extra="allow")

    chunk_index: int = Field(ge=0, description="Index of the chunk within its chunking call")
    source: str = Field(default="text", description="Provenance tag, e.g. 'text', 'crawl' or 'page_3'")
    page_number: Optional[int] = None
    url: Optional[str] = None
    title: Optional[str] = None
    crawled_from: Optional[str] = None

    def to_storage(self) -> Dict[str, Any]:
        """Serialize for the JSON column, dropping unset optional fields."""
        return self.model_dump(exclude_none=True)


class EmbeddingRecordCreate(BaseModel):
    """Payload for inserting one embedded chunk."""

    widget_id: Annotated[str, Field(min_length=1, description="Owning widget")]
    file_id: Optional[str] = Field(default=None, description="Owning file, if any")
    content_chunk: Annotated[str, Field(min_length=1, description="Chunk text")]
    embedding: List[float] = Field(description="Vector embedding of the chunk")
    metadata: EmbeddingMetadata

    @field_validator("embedding")
    @classmethod
    def validate_embedding(cls, v: List[float]) -> List[float]:
        if not v:
            raise ValueError("Embedding cannot be empty")
        return v


class StoredVector(BaseModel):
    """A stored embedding loaded for similarity ranking."""

    widget_id: str
    content_chunk: str
    embedding: List[float]
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SearchResult(BaseModel):
    """One ranked retrieval hit."""

    chunk: str = Field(description="Chunk text")
    similarity: float = Field(description="Cosine similarity to the query")
    metadata: Dict[str, Any] = Field(default_factory=dict)
    widget_id: str
