"""
Agent — the question-answering graph built with LangGraph.

This module wires a retriever and an answer generator into a two-stage
LangGraph workflow (``retrieve → generate``) that can be tested locally
with fake collaborators.

Public API
----------
- :func:`build_qa_graph` — compile the default workflow.
- :func:`create_initial_state` — bootstrap the state dict for ``graph.ainvoke()``.
- :class:`AnswerGenerator` — prompt + chat model with timeout and error translation.
- :class:`QAState` — the TypedDict flowing through every node.
"""

from docqa.agent.generator import AnswerGenerator
from docqa.agent.graph import PIPELINE_STAGES, build_graph, build_qa_graph, create_initial_state
from docqa.agent.state import QAState

__all__ = [
    "PIPELINE_STAGES",
    "AnswerGenerator",
    "QAState",
    "build_graph",
    "build_qa_graph",
    "create_initial_state",
]
