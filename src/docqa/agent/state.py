"""Query state definition — shared across all graph nodes.

The state flows through every node of the question-answering graph.
Each node returns a partial dict with only the keys it changed.
"""

from __future__ import annotations

from typing import TypedDict

from docqa.retrieval.models import RetrievalResult


class QAState(TypedDict, total=False):
    """Typed state that flows through the LangGraph query graph.

    Attributes
    ----------
    question:
        The user's natural-language question.
    passages:
        Retrieved passages with citations, nearest first (set by ``retrieve``).
    context:
        Retrieved passage texts joined into one prompt context string.
    answer:
        The generated answer (set by ``generate``).
    """

    question: str
    passages: list[RetrievalResult]
    context: str
    answer: str
