"""Pydantic schemas for chunking."""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ...infrastructure.config.settings import Settings, get_settings


class ChunkingConfig(BaseModel):
    """Chunk size and token budget parameters, injected into the chunker.

    Build one with ``from_settings()`` in application code; tests construct it
    directly to vary limits per case.
    """

    model_config = ConfigDict(frozen=True)

    default_max_words: int = Field(default=1000, ge=1, description="Words per chunk when the caller gives none")
    default_overlap_words: int = Field(default=100, ge=0, description="Words shared by neighbouring chunks")
    max_tokens: int = Field(default=8000, ge=1, description="Estimated-token ceiling per chunk")
    chars_per_token: float = Field(default=3.5, gt=0, description="Divisor used by the token estimator")
    long_word_threshold: float = Field(
        default=20.0, gt=0, description="Average word length above which text is chunked by characters"
    )
    small_range_words: int = Field(
        default=100, ge=1, description="Over-budget ranges this small are chunked by characters instead of split"
    )
    char_safety_margin: float = Field(default=0.9, gt=0, le=1, description="Share of the ceiling a character window may use")
    char_overlap_ratio: float = Field(default=0.1, ge=0, lt=1, description="Character overlap as a share of the window")
    min_char_progress: int = Field(default=100, ge=1, description="Minimum characters advanced per character window")

    @model_validator(mode="after")
    def validate_overlap(self) -> "ChunkingConfig":
        if self.default_overlap_words >= self.default_max_words:
            raise ValueError("default_overlap_words must be smaller than default_max_words")
        return self

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ChunkingConfig":
        """Build the config from application settings."""
        settings = settings or get_settings()
        return cls(
            default_max_words=settings.CHUNK_DEFAULT_WORDS,
            default_overlap_words=settings.CHUNK_OVERLAP_WORDS,
            max_tokens=settings.CHUNK_MAX_TOKENS,
            chars_per_token=settings.CHUNK_CHARS_PER_TOKEN,
            long_word_threshold=settings.CHUNK_LONG_WORD_THRESHOLD,
            small_range_words=settings.CHUNK_SMALL_RANGE_WORDS,
            char_safety_margin=settings.CHUNK_CHAR_SAFETY_MARGIN,
            char_overlap_ratio=settings.CHUNK_CHAR_OVERLAP_RATIO,
            min_char_progress=settings.CHUNK_MIN_CHAR_PROGRESS,
        )


class TextChunk(BaseModel):
    """A bounded, sequence-indexed slice of source text ready for embedding.

    Created by the chunker and never persisted directly.
    """

    model_config = ConfigDict(frozen=True)

    text: Annotated[str, Field(min_length=1, description="Trimmed chunk text")]
    chunk_index: int = Field(ge=0, description="Position within one chunking call")
    source: str = Field(default="text", description="Provenance tag, e.g. 'text' or 'page_3'")
    page_number: Optional[int] = Field(default=None, ge=0)
    widget_id: Optional[str] = None
    file_id: Optional[str] = None
