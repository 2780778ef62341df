"""Semantic retriever — question embedding + index search with citations.

Usage::

    retriever = SemanticRetriever(index, embedder, default_k=4)
    results   = await retriever.search("What is the warranty period?")
    for r in results:
        print(r.citation.short_ref(), r.content[:80])
"""

from __future__ import annotations

import logging
from typing import Any

from docqa.ingestion.embedder import Embedder
from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import Citation, RetrievalResult

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """High-level retriever that wraps any :class:`VectorStoreBase`.

    Parameters
    ----------
    store:
        The vector index to search.
    embedder:
        Used to embed the question before searching.
    default_k:
        Default number of results returned by :meth:`search`.
    score_threshold:
        Minimum similarity score; results below this are discarded.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder,
        *,
        default_k: int = 4,
        score_threshold: float | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.default_k = default_k
        self.score_threshold = score_threshold

    @property
    def store(self) -> VectorStoreBase:
        return self._store

    # -- public API -----------------------------------------------------------

    async def search(self, query: str, *, k: int | None = None) -> list[RetrievalResult]:
        """Embed *query* and return the nearest passages, nearest first.

        An empty index short-circuits to ``[]`` without calling the
        embedding service.
        """
        if len(self._store) == 0:
            return []
        embedding = await self._embedder.embed_query(query)
        return self.search_by_embedding(embedding, k=k)

    def search_by_embedding(self, embedding: list[float], *, k: int | None = None) -> list[RetrievalResult]:
        """Same as :meth:`search` but accepts a pre-computed embedding."""
        k = k if k is not None else self.default_k
        raw_hits = self._store.similarity_search(embedding, k=k)
        results = self._to_results(raw_hits)
        logger.debug("Retrieved %d/%d passage(s) from %s", len(results), len(raw_hits), self._store.source)
        return results

    # -- internals ------------------------------------------------------------

    def _to_results(self, raw_hits: list[dict[str, Any]]) -> list[RetrievalResult]:
        results: list[RetrievalResult] = []
        for hit in raw_hits:
            score = hit.get("score")
            if self.score_threshold is not None and score is not None and score < self.score_threshold:
                continue

            meta = hit.get("metadata", {})
            citation = Citation(
                document_id=hit.get("id"),
                source=meta.get("source", "unknown"),
                chunk_index=meta.get("chunk_index"),
                score=score,
                metadata=meta,
            )
            results.append(RetrievalResult(content=hit.get("content", ""), citation=citation))
        return results
