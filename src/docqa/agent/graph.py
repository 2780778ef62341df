"""LangGraph graph definition — the question-answering workflow.

The topology is described declaratively as an ordered list of named
stages; :func:`build_graph` wires them into a linear
:class:`StateGraph`.  The default pipeline is::

    START ──▶ retrieve ──▶ generate ──▶ END

``retrieve`` embeds the question and pulls the nearest passages from
the index; ``generate`` conditions the chat model on them.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from langgraph.graph import END, START, StateGraph

from docqa.agent.generator import AnswerGenerator
from docqa.agent.nodes import Node, make_generate_node, make_retrieve_node
from docqa.agent.state import QAState
from docqa.retrieval.retriever import SemanticRetriever

PIPELINE_STAGES = ("retrieve", "generate")


def build_graph(stages: Sequence[tuple[str, Node]]) -> Any:
    """Compile *stages* into a linear LangGraph workflow.

    Parameters
    ----------
    stages:
        ``(name, node)`` pairs in execution order.

    Returns
    -------
    CompiledGraph
        A compiled LangGraph workflow ready for ``.ainvoke()``.
    """
    if not stages:
        raise ValueError("a pipeline needs at least one stage")

    workflow = StateGraph(QAState)
    for name, node in stages:
        workflow.add_node(name, node)

    names = [name for name, _ in stages]
    workflow.add_edge(START, names[0])
    for src, dst in zip(names, names[1:]):
        workflow.add_edge(src, dst)
    workflow.add_edge(names[-1], END)

    return workflow.compile()


def build_qa_graph(
    retriever: SemanticRetriever,
    generator: AnswerGenerator,
    *,
    k: int | None = None,
    delimiter: str = "\n\n",
) -> Any:
    """Compile the default ``retrieve → generate`` graph."""
    nodes = {
        "retrieve": make_retrieve_node(retriever, k=k, delimiter=delimiter),
        "generate": make_generate_node(generator),
    }
    return build_graph([(name, nodes[name]) for name in PIPELINE_STAGES])


def create_initial_state(question: str) -> dict[str, Any]:
    """Build the initial state dict for ``graph.ainvoke()``.

    Usage::

        graph = build_qa_graph(retriever, generator)
        result = await graph.ainvoke(create_initial_state("Who signed it?"))
        print(result["answer"])
    """
    return {"question": question, "passages": [], "context": "", "answer": ""}
