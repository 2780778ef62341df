"""Prompt templates for the question-answering graph.

The default template is the public ``rlm/rag-prompt`` from the LangChain
Hub.  Setting ``PROMPT_HUB_REF`` fetches a template from the Hub instead,
once per index build.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from langchain_core.prompts import BasePromptTemplate, ChatPromptTemplate

from docqa.errors import IndexBuildError
from docqa.retrieval.models import RetrievalResult

logger = logging.getLogger(__name__)

REQUIRED_VARIABLES = frozenset({"question", "context"})

RAG_PROMPT = """\
You are an assistant for question-answering tasks. Use the following pieces \
of retrieved context to answer the question. If you don't know the answer, \
just say that you don't know. Use three sentences maximum and keep the \
answer concise.
Question: {question}
Context: {context}
Answer:"""


def build_rag_prompt() -> ChatPromptTemplate:
    """Return the built-in RAG prompt template."""
    return ChatPromptTemplate.from_messages([("human", RAG_PROMPT)])


def load_prompt_template(hub_ref: str = "") -> BasePromptTemplate:
    """Return the prompt used by the ``generate`` node.

    Parameters
    ----------
    hub_ref:
        LangChain Hub reference (e.g. ``"rlm/rag-prompt"``).  Empty
        returns :func:`build_rag_prompt` without any network access.

    Raises
    ------
    IndexBuildError
        When the Hub fetch fails or the template does not take both
        ``question`` and ``context``.
    """
    if not hub_ref:
        return build_rag_prompt()

    from langsmith import Client

    try:
        prompt = Client().pull_prompt(hub_ref)
    except Exception as exc:
        raise IndexBuildError(f"could not fetch prompt {hub_ref!r}: {exc}", stage="prompt") from exc

    missing = REQUIRED_VARIABLES - set(prompt.input_variables)
    if missing:
        raise IndexBuildError(f"prompt {hub_ref!r} lacks variables {sorted(missing)}", stage="prompt")
    logger.info("Loaded prompt template %s from the hub", hub_ref)
    return prompt


def format_context(results: Sequence[RetrievalResult], delimiter: str = "\n\n") -> str:
    """Join retrieved passage texts, nearest first."""
    return delimiter.join(r.content for r in results)
