"""Abstract base class for vector-index backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase`
and implementing the abstract methods.  The retriever and the query
graph are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class VectorStoreBase(ABC):
    """Backend-agnostic, read-only vector-index interface.

    Parameters
    ----------
    source:
        Display name of the document the index was built from.
    """

    def __init__(self, source: str) -> None:
        self.source = source

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def similarity_search(self, query_embedding: list[float], *, k: int = 4) -> list[dict[str, Any]]:
        """Return the top-*k* results matching *query_embedding*, nearest first.

        Each result dict **must** contain at least:

        * ``"id"`` – passage identifier
        * ``"content"`` – the textual content
        * ``"score"`` – similarity score (higher = more similar)
        * ``"metadata"`` – associated metadata dict

        An empty index returns an empty list.
        """
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Number of indexed passages."""
        ...
