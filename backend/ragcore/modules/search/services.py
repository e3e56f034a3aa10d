"""Ranked similarity retrieval over stored widget embeddings."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.config.settings import get_settings
from ...infrastructure.embedding import EmbeddingGenerator, get_embedding_generator
from ...infrastructure.indexing import IndexedVector, LinearSearchIndex
from ...infrastructure.logging import get_logger
from ..common.exceptions import ValidationError
from ..embedding.schemas import SearchResult, StoredVector
from ..embedding.services import EmbeddingStoreService

logger = get_logger(__name__)


class SimilaritySearchService:
    """Service answering RAG retrieval queries.

    The query is embedded with the same generator used at ingestion, then
    scored by cosine similarity against every stored vector in scope. If the
    query cannot be embedded the search fails; there is no fallback scoring.
    """

    def __init__(
        self,
        generator: Optional[EmbeddingGenerator] = None,
        store: Optional[EmbeddingStoreService] = None,
    ):
        self.generator = generator or get_embedding_generator()
        self.store = store or EmbeddingStoreService()

    async def search(
        self,
        query: str,
        db: AsyncSession,
        widget_id: Optional[str] = None,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> List[SearchResult]:
        """Search stored chunks by similarity to ``query``.

        Args:
            query: User question
            db: Database session
            widget_id: Restrict the search to this widget's embeddings
            limit: Maximum number of results
            threshold: Only similarities strictly greater than this are returned

        Returns:
            Results ordered by similarity, highest first. An empty list is a
            valid answer.

        Raises:
            ValidationError: If limit is below 1 or stored vectors do not match the model dimension
            EmbeddingGenerationError: If the query could not be embedded
            ChunkTooLargeError: If the query exceeds the token ceiling
            StoreError: If stored vectors could not be loaded
        """
        settings = get_settings()
        limit = settings.SEARCH_DEFAULT_LIMIT if limit is None else limit
        threshold = settings.SEARCH_DEFAULT_THRESHOLD if threshold is None else threshold

        if limit < 1:
            raise ValidationError(f"limit must be at least 1, got {limit}")

        query_embedding = await self.generator.generate(query)
        stored = await self.store.fetch_vectors(db, widget_id=widget_id)

        results = self.rank(query_embedding, stored, limit=limit, threshold=threshold)

        logger.debug(
            f"Search returned {len(results)} of {len(stored)} candidates",
            extra={"widget_id": widget_id, "limit": limit, "threshold": threshold},
        )
        return results

    def rank(
        self, query_embedding: List[float], stored: List[StoredVector], limit: int, threshold: float
    ) -> List[SearchResult]:
        """Score stored vectors against the query and keep the best ``limit`` above ``threshold``."""
        if not stored:
            return []

        index = LinearSearchIndex(dimension=len(query_embedding))
        try:
            index.add_vectors([IndexedVector(embedding=vector.embedding, payload=vector) for vector in stored])
        except ValueError as e:
            raise ValidationError(f"Stored embeddings do not match the query model: {e}") from e

        return [
            SearchResult(
                chunk=match.payload.content_chunk,
                similarity=match.similarity,
                metadata=match.payload.metadata,
                widget_id=match.payload.widget_id,
            )
            for match in index.search(query_embedding, k=limit, threshold=threshold)
        ]
