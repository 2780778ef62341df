"""Embedding client — one place to swap providers.

Supports two providers:

1. **openai** (default) — a hosted embeddings endpoint through
   ``OpenAIEmbeddings``.  ``EMBEDDING_BASE_URL`` points it at any
   OpenAI-compatible service.
2. **huggingface** — a local sentence-transformers model through
   ``HuggingFaceEmbeddings``.

:class:`Embedder` wraps either one with batching, a per-call timeout,
and error translation to :class:`~docqa.errors.EmbeddingServiceError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from langchain_core.embeddings import Embeddings

from docqa.config import Settings, settings
from docqa.errors import EmbeddingServiceError

logger = logging.getLogger(__name__)


def get_embedding_function(config: Settings = settings) -> Embeddings:
    """Return the configured LangChain embedding function."""
    provider = config.embedding_provider.lower()

    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=config.embedding_model)

    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        kwargs: dict = {"model": config.embedding_model}
        if config.embedding_api_key:
            kwargs["api_key"] = config.embedding_api_key
        if config.embedding_base_url:
            logger.info("Using embeddings endpoint: %s", config.embedding_base_url)
            kwargs["base_url"] = config.embedding_base_url
        return OpenAIEmbeddings(**kwargs)

    raise ValueError(f"Unknown embedding provider: {config.embedding_provider!r}")


class Embedder:
    """Async facade over a LangChain :class:`Embeddings` implementation.

    Parameters
    ----------
    embeddings:
        The provider-specific embedding function.
    batch_size:
        Maximum number of texts sent per request while indexing.
    timeout_s:
        Upper bound for a single embedding request, in seconds.
    """

    def __init__(self, embeddings: Embeddings, *, batch_size: int = 64, timeout_s: float = 60.0) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._embeddings = embeddings
        self.batch_size = batch_size
        self.timeout_s = timeout_s

    @classmethod
    def from_settings(cls, config: Settings = settings) -> Embedder:
        return cls(
            get_embedding_function(config),
            batch_size=config.embedding_batch_size,
            timeout_s=config.embedding_timeout_s,
        )

    async def embed_passages(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts* in batches, preserving order."""
        vectors: list[list[float]] = []
        for offset in range(0, len(texts), self.batch_size):
            batch = list(texts[offset : offset + self.batch_size])
            result = await self._call(self._embeddings.aembed_documents(batch), what="documents")
            if len(result) != len(batch):
                raise EmbeddingServiceError(
                    f"embedding service returned {len(result)} vectors for {len(batch)} texts"
                )
            vectors.extend(result)
        logger.info("Embedded %d passage(s) in %d batch(es)", len(texts), -(-len(texts) // self.batch_size))
        return vectors

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single question."""
        return await self._call(self._embeddings.aembed_query(text), what="query")

    async def _call(self, coro, *, what: str):  # noqa: ANN001, ANN202
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout_s)
        except asyncio.TimeoutError as exc:
            raise EmbeddingServiceError(f"embedding {what} timed out after {self.timeout_s}s") from exc
        except EmbeddingServiceError:
            raise
        except Exception as exc:
            logger.exception("Embedding %s failed", what)
            raise EmbeddingServiceError(f"embedding {what} failed: {exc}") from exc
