"""Embedding provider capability."""

from typing import List, Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Turns one text into one vector with a fixed model.

    Implementations raise whatever their client raises; ``EmbeddingGenerator``
    owns validation and error wrapping.
    """

    model_name: str

    @property
    def embedding_dimension(self) -> int: ...

    async def embed(self, text: str) -> List[float]: ...
