"""
Ingestion — document loading, chunking, and embedding.

Converts an uploaded document (PDF or plain text) into overlapping
passages and their embedding vectors, ready to be placed in an
in-memory vector index.
"""

from docqa.ingestion.chunker import chunk_text, iter_passages, reconstruct_text
from docqa.ingestion.embedder import Embedder, get_embedding_function
from docqa.ingestion.loader import detect_format, extract_text
from docqa.ingestion.models import IndexedPassage, Passage, UploadedDocument

__all__ = [
    "Embedder",
    "IndexedPassage",
    "Passage",
    "UploadedDocument",
    "chunk_text",
    "detect_format",
    "extract_text",
    "get_embedding_function",
    "iter_passages",
    "reconstruct_text",
]
