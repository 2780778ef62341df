"""Graph nodes — each function is one step of the question-answering graph.

Node contract
-------------
* Accepts the full :class:`QAState` dict.
* Returns a *partial* dict with **only the keys that changed**.
* Collaborators (retriever, generator) are bound when the node is made,
  never looked up from module state, so every node is testable on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from docqa.agent.generator import AnswerGenerator
from docqa.agent.prompts import format_context
from docqa.agent.state import QAState
from docqa.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)

Node = Callable[[QAState], Awaitable[dict[str, Any]]]


# ── 1. RETRIEVE ───────────────────────────────────────────────────────


def make_retrieve_node(
    retriever: SemanticRetriever,
    *,
    k: int | None = None,
    delimiter: str = "\n\n",
) -> Node:
    """Build the node that fetches passages and assembles the context."""

    async def retrieve(state: QAState) -> dict[str, Any]:
        results = await retriever.search(state["question"], k=k)
        logger.info(
            "retrieve: %d passage(s) for %r: %s",
            len(results),
            state["question"][:80],
            [r.citation.short_ref() for r in results],
        )
        return {"passages": results, "context": format_context(results, delimiter)}

    return retrieve


# ── 2. GENERATE ───────────────────────────────────────────────────────


def make_generate_node(generator: AnswerGenerator) -> Node:
    """Build the node that turns question + context into an answer."""

    async def generate(state: QAState) -> dict[str, Any]:
        answer = await generator.generate(state["question"], state.get("context", ""))
        logger.info("generate: answer length %d chars", len(answer))
        return {"answer": answer}

    return generate
