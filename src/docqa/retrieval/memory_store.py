"""In-memory implementation of the vector-store abstraction.

The index is a dense ``numpy`` matrix of L2-normalised passage vectors;
search is a brute-force cosine similarity followed by a *stable* sort,
so passages with equal scores come back in insertion order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np

from docqa.errors import IndexBuildError
from docqa.ingestion.models import IndexedPassage, Passage
from docqa.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


def _normalise(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=-1, keepdims=True)
    # Zero vectors stay zero and score 0 against everything.
    norms[norms == 0.0] = 1.0
    return matrix / norms


class InMemoryVectorIndex(VectorStoreBase):
    """Immutable in-memory vector index.

    Instances are created complete through :meth:`build` and never
    mutated afterwards; replacing an index means building a new one.

    Parameters
    ----------
    source:
        Display name of the indexed document.
    passages:
        The indexed passages, in document order.
    vectors:
        ``(len(passages), dim)`` matrix of embeddings.
    """

    def __init__(self, source: str, passages: Sequence[Passage], vectors: np.ndarray) -> None:
        super().__init__(source)
        self._passages: tuple[Passage, ...] = tuple(passages)
        self._vectors = _normalise(vectors) if len(self._passages) else vectors
        self._vectors.setflags(write=False)

    @classmethod
    def build(cls, indexed_passages: Sequence[IndexedPassage], *, source: str = "unknown") -> InMemoryVectorIndex:
        """Create an index from passages paired with their embeddings.

        Raises
        ------
        IndexBuildError
            When vectors are empty or do not share one dimension.
        """
        if not indexed_passages:
            return cls(source, [], np.zeros((0, 0), dtype=np.float32))

        dims = {len(ip.embedding) for ip in indexed_passages}
        if len(dims) != 1 or 0 in dims:
            raise IndexBuildError(f"inconsistent embedding dimensions: {sorted(dims)}")

        vectors = np.asarray([ip.embedding for ip in indexed_passages], dtype=np.float32)
        index = cls(source, [ip.passage for ip in indexed_passages], vectors)
        logger.info("Built in-memory index for %s: %d passages, dim=%d", source, len(index), index.dimension)
        return index

    @classmethod
    def from_passages(
        cls,
        passages: Sequence[Passage],
        embeddings: Sequence[Sequence[float]],
        *,
        source: str = "unknown",
    ) -> InMemoryVectorIndex:
        """Pair *passages* with *embeddings* positionally and :meth:`build`."""
        if len(passages) != len(embeddings):
            raise IndexBuildError(f"{len(passages)} passages but {len(embeddings)} embeddings")
        indexed = [IndexedPassage(passage=p, embedding=tuple(e)) for p, e in zip(passages, embeddings)]
        return cls.build(indexed, source=source)

    # -- VectorStoreBase overrides --------------------------------------------

    def similarity_search(self, query_embedding: list[float], *, k: int = 4) -> list[dict[str, Any]]:
        if not self._passages or k <= 0:
            return []

        query = np.asarray(query_embedding, dtype=np.float32)
        if query.shape != (self.dimension,):
            raise ValueError(f"query has dimension {query.shape[-1]}, index expects {self.dimension}")

        scores = self._vectors @ _normalise(query)
        order = np.argsort(-scores, kind="stable")[:k]

        hits: list[dict[str, Any]] = []
        for i in order:
            passage = self._passages[i]
            hits.append(
                {
                    "id": f"{self.source}#{passage.index}",
                    "content": passage.text,
                    "score": float(scores[i]),
                    "metadata": {
                        "source": self.source,
                        "chunk_index": passage.index,
                        "start": passage.start,
                        "overlap": passage.overlap,
                    },
                }
            )
        return hits

    def __len__(self) -> int:
        return len(self._passages)

    @property
    def dimension(self) -> int:
        return int(self._vectors.shape[1]) if self._vectors.ndim == 2 else 0

    @property
    def passages(self) -> tuple[Passage, ...]:
        return self._passages
