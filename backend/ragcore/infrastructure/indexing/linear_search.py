"""Linear search vector index implementation."""

from typing import List, Optional

import numpy as np

from .base import IndexedVector, IndexType, ScoredVector, VectorIndex


class LinearSearchIndex(VectorIndex):
    """Brute-force cosine similarity over every indexed vector.

    Characteristics:
    - Time Complexity (Search): O(n * d) where n = vectors, d = dimension
    - Accuracy: 100% (exact results)
    - Build Time: none

    Similarities are raw cosine values in [-1, 1]; a zero-magnitude vector
    scores 0.0 against everything. Ties keep insertion order.
    """

    def __init__(self, dimension: int):
        super().__init__(dimension)
        self._vectors: List[IndexedVector] = []

    @property
    def index_type(self) -> IndexType:
        return IndexType.LINEAR_SEARCH

    def __len__(self) -> int:
        return len(self._vectors)

    def add_vectors(self, vectors: List[IndexedVector]) -> None:
        for vector in vectors:
            self._validate_embedding(vector.embedding)

        self._vectors.extend(vectors)

    def search(
        self, query_embedding: List[float], k: int, threshold: Optional[float] = None
    ) -> List[ScoredVector]:
        self._validate_embedding(query_embedding)

        if not self._vectors or k < 1:
            return []

        similarities = self.cosine_similarities(query_embedding, [vector.embedding for vector in self._vectors])
        order = np.argsort(-similarities, kind="stable")

        results = []
        for position in order:
            similarity = float(similarities[position])
            if threshold is not None and not similarity > threshold:
                break
            results.append(ScoredVector(similarity=similarity, payload=self._vectors[position].payload))
            if len(results) == k:
                break

        return results

    @staticmethod
    def cosine_similarities(query_embedding: List[float], embeddings: List[List[float]]) -> np.ndarray:
        """Cosine similarity of the query against each row.

        Formula: cos(θ) = (A · B) / (||A|| ||B||)
        """
        matrix = np.asarray(embeddings, dtype=np.float64)
        query = np.asarray(query_embedding, dtype=np.float64)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query

        similarities = np.zeros(len(matrix), dtype=np.float64)
        nonzero = norms > 0
        similarities[nonzero] = dots[nonzero] / norms[nonzero]

        return similarities
