"""Embedding generation with a hard token ceiling."""

from functools import lru_cache
from typing import List, Optional

from ...modules.common.exceptions import ChunkTooLargeError, EmbeddingGenerationError, ValidationError
from ...modules.common.utils.token_estimator import TokenEstimator
from ..config.settings import EmbeddingProviderOption, Settings, get_settings
from ..logging import get_logger
from .base import EmbeddingProvider

logger = get_logger(__name__)


class EmbeddingGenerator:
    """Generates one embedding per chunk through an ``EmbeddingProvider``.

    The generator enforces the token ceiling a second time after the chunker:
    over-budget text fails with ``ChunkTooLargeError`` before any network call,
    and is never truncated. Provider failures of any kind surface as
    ``EmbeddingGenerationError``. There is no internal retry.

    Cancelling the awaiting task cancels the in-flight provider call;
    ``asyncio.CancelledError`` is never wrapped.
    """

    def __init__(self, provider: EmbeddingProvider, max_tokens: int = 8000, chars_per_token: float = 3.5):
        self.provider = provider
        self.max_tokens = max_tokens
        self.estimator = TokenEstimator(chars_per_token)

    @property
    def model_name(self) -> str:
        return self.provider.model_name

    @property
    def embedding_dimension(self) -> int:
        return self.provider.embedding_dimension

    @staticmethod
    def clean_text(text: str) -> str:
        """Collapse newlines to spaces and trim."""
        return text.replace("\r\n", " ").replace("\n", " ").strip()

    async def generate(self, text: str) -> List[float]:
        """Generate the embedding vector for ``text``.

        Args:
            text: Chunk or query text

        Returns:
            Vector of ``embedding_dimension`` floats

        Raises:
            ValidationError: If the text is empty after cleaning
            ChunkTooLargeError: If the estimated token count exceeds the ceiling
            EmbeddingGenerationError: If the provider call fails or returns a malformed vector
        """
        clean_text = self.clean_text(text)
        if not clean_text:
            raise ValidationError("Text cannot be empty")

        estimated_tokens = self.estimator.estimate(clean_text)
        if estimated_tokens > self.max_tokens:
            raise ChunkTooLargeError(estimated_tokens, self.max_tokens, len(clean_text))

        try:
            embedding = await self.provider.embed(clean_text)
        except Exception as e:
            logger.error(
                f"Embedding provider call failed: {e}",
                extra={"model": self.model_name, "char_count": len(clean_text)},
            )
            raise EmbeddingGenerationError(f"Failed to generate embedding with {self.model_name}") from e

        if not embedding or len(embedding) != self.embedding_dimension:
            raise EmbeddingGenerationError(
                f"Malformed embedding from {self.model_name}: expected {self.embedding_dimension} dimensions, "
                f"got {len(embedding) if embedding else 0}"
            )

        return embedding


def create_embedding_provider(settings: Optional[Settings] = None) -> EmbeddingProvider:
    """Build the system-wide embedding provider from settings."""
    settings = settings or get_settings()

    if settings.EMBEDDING_PROVIDER == EmbeddingProviderOption.LOCAL:
        from .sentence_transformer_provider import SentenceTransformerEmbeddingProvider

        return SentenceTransformerEmbeddingProvider(
            model_name=settings.LOCAL_EMBEDDING_MODEL, dimension=settings.EMBEDDING_DIMENSION
        )

    from .openai_provider import OpenAIEmbeddingProvider

    return OpenAIEmbeddingProvider(
        api_key=settings.OPENAI_API_KEY,
        model_name=settings.EMBEDDING_MODEL,
        dimension=settings.EMBEDDING_DIMENSION,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.EMBEDDING_TIMEOUT_SECONDS,
    )


@lru_cache()
def get_embedding_generator() -> EmbeddingGenerator:
    """Get singleton embedding generator instance."""
    settings = get_settings()
    return EmbeddingGenerator(
        provider=create_embedding_provider(settings),
        max_tokens=settings.CHUNK_MAX_TOKENS,
        chars_per_token=settings.CHUNK_CHARS_PER_TOKEN,
    )
