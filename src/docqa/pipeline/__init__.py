"""
Pipeline — the build/ask state machine and its per-session registry.

Public surface
--------------
- :class:`PipelineController` — ``build(document)`` / ``ask(question)``.
- :class:`PipelineDependencies` — embedder + chat model shared by controllers.
- :class:`SessionRegistry` — session id → controller.
"""

from docqa.pipeline.controller import (
    PipelineController,
    PipelineDependencies,
    PipelineSnapshot,
    PipelineState,
    QueryResult,
)
from docqa.pipeline.sessions import DEFAULT_SESSION, SessionRegistry

__all__ = [
    "DEFAULT_SESSION",
    "PipelineController",
    "PipelineDependencies",
    "PipelineSnapshot",
    "PipelineState",
    "QueryResult",
    "SessionRegistry",
]
