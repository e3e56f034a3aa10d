"""Local embedding provider using sentence-transformers."""

import asyncio
from typing import List, Optional, cast

from sentence_transformers import SentenceTransformer


class SentenceTransformerEmbeddingProvider:
    """Embedding provider backed by a local sentence-transformers model.

    The model is loaded lazily on first use, in a worker thread, under an
    ``asyncio.Lock`` so concurrent first calls load it once. Vectors are
    normalized, so cosine similarity equals the dot product.
    """

    def __init__(self, model_name: str = "all-mpnet-base-v2", dimension: int = 768):
        """Initialize the provider.

        Args:
            model_name: HuggingFace model name for sentence transformers
            dimension: Output dimension of the model
        """
        self.model_name = model_name
        self._dimension = dimension
        self._model: Optional[SentenceTransformer] = None
        self._model_lock = asyncio.Lock()

    async def _get_model(self) -> SentenceTransformer:
        """Get model instance, loading it if necessary."""
        if self._model is None:
            async with self._model_lock:
                if self._model is None:
                    self._model = cast(SentenceTransformer, await asyncio.to_thread(SentenceTransformer, self.model_name))
        if self._model is None:
            raise RuntimeError("Model failed to load")
        return self._model

    @property
    def embedding_dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> List[float]:
        """Generate the embedding for a single text."""
        model = await self._get_model()

        embedding = await asyncio.to_thread(
            model.encode,
            text,
            convert_to_tensor=False,
            normalize_embeddings=True,
        )

        return embedding.tolist()

    async def is_loaded(self) -> bool:
        """Check if model is loaded."""
        return self._model is not None
