"""Domain models for uploaded documents and the passages cut from them."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UploadedDocument(BaseModel):
    """Raw bytes of an upload plus its display name.

    Lives only for the duration of one build; nothing is retained.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes
    content_type: str | None = None


class Passage(BaseModel):
    """A contiguous span of extracted text — the unit of retrieval.

    Attributes
    ----------
    text:
        The passage text, overlap prefix included.
    index:
        Ordinal position of the passage within its document.
    start:
        Offset of ``text[0]`` in the extracted document text.
    overlap:
        Number of leading characters shared with the previous passage.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    index: int
    start: int
    overlap: int = 0

    @property
    def end(self) -> int:
        """Offset one past the last character of the passage."""
        return self.start + len(self.text)

    @property
    def new_text(self) -> str:
        """The passage with the overlap prefix removed."""
        return self.text[self.overlap :]


class IndexedPassage(BaseModel):
    """A :class:`Passage` paired with its embedding vector."""

    model_config = ConfigDict(frozen=True)

    passage: Passage
    embedding: tuple[float, ...] = Field(default_factory=tuple)
