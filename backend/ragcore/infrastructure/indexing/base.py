"""Abstract base classes for vector indexes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional


class IndexType(str, Enum):
    """Supported index types."""

    LINEAR_SEARCH = "linear_search"


@dataclass
class IndexedVector:
    """A vector together with the payload returned when it matches."""

    embedding: List[float]
    payload: Any


@dataclass
class ScoredVector:
    """A matched payload with its similarity to the query."""

    similarity: float
    payload: Any


class VectorIndex(ABC):
    """Interface for vector indexes.

    An index holds vectors of a single dimension; adding or querying with any
    other dimension is rejected, because vectors from different models are not
    comparable.
    """

    def __init__(self, dimension: int):
        """Initialize the vector index.

        Args:
            dimension: The dimension of the vectors to be indexed
        """
        if dimension < 1:
            raise ValueError("dimension must be positive")
        self.dimension = dimension

    @property
    @abstractmethod
    def index_type(self) -> IndexType:
        """Return the type of this index."""
        pass

    @abstractmethod
    def add_vectors(self, vectors: List[IndexedVector]) -> None:
        """Add vectors to the index.

        Raises:
            ValueError: If any vector has the wrong dimension
        """
        pass

    @abstractmethod
    def search(
        self, query_embedding: List[float], k: int, threshold: Optional[float] = None
    ) -> List[ScoredVector]:
        """Return up to ``k`` vectors most similar to the query.

        Args:
            query_embedding: The query vector
            k: Maximum number of results
            threshold: When given, only similarities strictly greater than it are kept

        Returns:
            Results sorted by similarity, highest first
        """
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def _validate_embedding(self, embedding: List[float]) -> None:
        """Validate that an embedding has the index dimension.

        Raises:
            ValueError: If the embedding dimension is incorrect
        """
        if len(embedding) != self.dimension:
            raise ValueError(f"Embedding dimension {len(embedding)} does not match index dimension {self.dimension}")
