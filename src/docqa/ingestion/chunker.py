"""Text chunking with exact, offset-tracked overlap.

The boundary of every passage is chosen by LangChain's
``RecursiveCharacterTextSplitter`` (paragraph, line, sentence, word, then
a hard character cut), but only the *new* text of each passage comes from
the splitter. The overlap is then copied verbatim from the text that
precedes it, so passages carry exact offsets: stripping each passage's
overlap prefix and concatenating the rest reproduces the input.
"""

from __future__ import annotations

from collections.abc import Iterator

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docqa.ingestion.models import Passage

DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


def iter_passages(
    text: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
    separators: list[str] | None = None,
) -> Iterator[Passage]:
    """Lazily split *text* into overlapping :class:`Passage` objects.

    Parameters
    ----------
    text:
        Extracted document text.
    chunk_size:
        Maximum number of characters per passage, overlap included.
    chunk_overlap:
        Number of characters each passage repeats from the text before it.
    separators:
        Boundary preference, highest first (defaults to paragraph, line,
        sentence, word, character).

    Yields
    ------
    Passage
        Passages in document order.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise ValueError(f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap}")

    # The first passage has no overlap prefix, so it may take a full chunk of new text.
    splitters = {
        chunk_size: _make_splitter(chunk_size, separators),
        chunk_size - chunk_overlap: _make_splitter(chunk_size - chunk_overlap, separators),
    }

    position = 0
    index = 0
    while position < len(text):
        limit = chunk_size if index == 0 else chunk_size - chunk_overlap
        core = _next_core(text, position, limit, splitters[limit])

        overlap_start = max(0, position - chunk_overlap)
        yield Passage(
            text=text[overlap_start : position + len(core)],
            index=index,
            start=overlap_start,
            overlap=position - overlap_start,
        )
        position += len(core)
        index += 1


def chunk_text(
    text: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
    separators: list[str] | None = None,
) -> list[Passage]:
    """Eager variant of :func:`iter_passages`."""
    return list(iter_passages(text, chunk_size, chunk_overlap, separators))


def reconstruct_text(passages: list[Passage]) -> str:
    """Join *passages* back into the text they were cut from."""
    return "".join(p.new_text for p in passages)


def _make_splitter(chunk_size: int, separators: list[str] | None) -> RecursiveCharacterTextSplitter:
    # Separators stay attached to the following piece and nothing is
    # stripped, so every chunk is an exact substring of the input.
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=0,
        length_function=len,
        separators=separators or DEFAULT_SEPARATORS,
        keep_separator="start",
        strip_whitespace=False,
    )


def _next_core(text: str, position: int, limit: int, splitter: RecursiveCharacterTextSplitter) -> str:
    """Return the next run of new text, at most *limit* characters long.

    The splitter sees one character more than *limit*, so the window can
    never fit in a single chunk and its first chunk ends on the best
    boundary available.
    """
    if len(text) - position <= limit:
        return text[position:]
    window = text[position : position + limit + 1]
    chunks = splitter.split_text(window)
    if chunks and 0 < len(chunks[0]) <= limit and window.startswith(chunks[0]):
        return chunks[0]
    return window[:limit]
