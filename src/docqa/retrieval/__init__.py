"""
Retrieval — in-memory vector index and question-to-passage search.

This module wraps the vector index behind a clean interface so that
the query graph never needs to know which backend serves retrieval.

Public surface
--------------
- :class:`SemanticRetriever` — embeds a question and searches the index.
- :class:`VectorStoreBase` — abstract backend.
- :class:`InMemoryVectorIndex` — default immutable numpy backend.
- :class:`Citation`, :class:`RetrievalResult` — data models.
"""

from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.memory_store import InMemoryVectorIndex
from docqa.retrieval.models import Citation, RetrievalResult
from docqa.retrieval.retriever import SemanticRetriever

__all__ = [
    "Citation",
    "InMemoryVectorIndex",
    "RetrievalResult",
    "SemanticRetriever",
    "VectorStoreBase",
]
