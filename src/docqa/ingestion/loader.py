"""Document loaders — turn an uploaded byte stream into plain text.

PDF parsing goes through LangChain's ``PyPDFLoader`` (pypdf), which needs
a path on disk, so the upload is spooled to a temporary file that is
removed as soon as the pages are read.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.document_loaders import PyPDFLoader

from docqa.errors import ExtractionError, UnsupportedFormat
from docqa.ingestion.models import UploadedDocument

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"
TEXT_SUFFIXES = {".txt", ".md", ".markdown"}
PAGE_SEPARATOR = "\n\n"


def detect_format(document: UploadedDocument) -> str:
    """Return ``"pdf"`` or ``"text"`` for *document*.

    Raises
    ------
    UnsupportedFormat
        When neither the name, the content type nor the magic bytes
        identify a supported format.
    """
    suffix = Path(document.name).suffix.lower()
    content_type = (document.content_type or "").split(";")[0].strip().lower()

    if suffix == ".pdf" or content_type == "application/pdf" or document.content.startswith(PDF_MAGIC):
        return "pdf"
    if suffix in TEXT_SUFFIXES or content_type.startswith("text/"):
        return "text"
    raise UnsupportedFormat(f"cannot ingest {document.name!r} (content type {content_type or 'unknown'})")


def extract_text(document: UploadedDocument, *, upload_dir: str | Path | None = None) -> str:
    """Extract the plain text of *document*.

    Parameters
    ----------
    document:
        The uploaded bytes and their display name.
    upload_dir:
        Directory for the temporary PDF spool file (system temp dir when
        *None*).

    Raises
    ------
    UnsupportedFormat
        The format is not recognised.
    ExtractionError
        The bytes could not be parsed, or no text was found.
    """
    fmt = detect_format(document)
    if fmt == "pdf":
        text = PAGE_SEPARATOR.join(doc.page_content for doc in load_pdf_bytes(document.content, upload_dir=upload_dir))
    else:
        text = _decode_text(document)

    if not text.strip():
        raise ExtractionError(f"no extractable text in {document.name!r}")
    logger.info("Extracted %d chars from %s (%s)", len(text), document.name, fmt)
    return text


def load_pdf(path: str | Path) -> list[Document]:
    """Load a single PDF file, one ``Document`` per page."""
    return PyPDFLoader(str(path)).load()


def load_pdf_bytes(data: bytes, *, upload_dir: str | Path | None = None) -> list[Document]:
    """Spool *data* to a temporary file and load it with :func:`load_pdf`."""
    if upload_dir is not None:
        Path(upload_dir).mkdir(parents=True, exist_ok=True)

    fd, path = tempfile.mkstemp(suffix=".pdf", prefix="document-", dir=upload_dir)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        return load_pdf(path)
    except Exception as exc:
        raise ExtractionError(f"could not parse PDF: {exc}") from exc
    finally:
        Path(path).unlink(missing_ok=True)


def _decode_text(document: UploadedDocument) -> str:
    try:
        return document.content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ExtractionError(f"{document.name!r} is not valid UTF-8 text") from exc
