"""Pipeline controller — the ``Empty``/``Ready`` state machine.

A controller owns one *snapshot* at a time: an immutable, version-tagged
bundle of the vector index, the answer generator and the compiled query
graph built from one uploaded document.

* ``build`` runs ingest → chunk → embed → index → compile and installs
  the new snapshot with a single assignment.  Builds on one controller
  are serialised by a lock; a failed build leaves the previous snapshot
  in place.
* ``ask`` reads the snapshot pointer once and runs the query graph on
  it, so a concurrent build can never expose a half-built index.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from langchain_core.runnables import Runnable

from docqa.agent.generator import AnswerGenerator
from docqa.agent.graph import build_qa_graph, create_initial_state
from docqa.agent.llm import get_llm
from docqa.agent.prompts import load_prompt_template
from docqa.config import Settings, settings
from docqa.errors import GenericProcessingError, IndexBuildError, InvalidQuestion, NotReady, PipelineError
from docqa.ingestion.chunker import iter_passages
from docqa.ingestion.embedder import Embedder
from docqa.ingestion.loader import extract_text
from docqa.ingestion.models import UploadedDocument
from docqa.logging_config import log_latency
from docqa.retrieval.memory_store import InMemoryVectorIndex
from docqa.retrieval.models import RetrievalResult
from docqa.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)


class PipelineState(str, enum.Enum):
    EMPTY = "empty"
    READY = "ready"


@dataclass
class PipelineDependencies:
    """External collaborators shared by every controller."""

    embedder: Embedder
    llm: Runnable
    config: Settings = field(default_factory=lambda: settings)

    @classmethod
    def from_settings(cls, config: Settings = settings) -> PipelineDependencies:
        return cls(embedder=Embedder.from_settings(config), llm=get_llm(config), config=config)


@dataclass(frozen=True)
class PipelineSnapshot:
    """Everything needed to answer questions about one document."""

    version: int
    document: str
    index: InMemoryVectorIndex
    graph: Any


@dataclass(frozen=True)
class QueryResult:
    """Answer plus the passages it was generated from."""

    answer: str
    passages: list[RetrievalResult]
    version: int


class PipelineController:
    """Owns the current snapshot for one session.

    Parameters
    ----------
    dependencies:
        The collaborators, or a zero-argument callable returning them.
        The callable is only invoked on the first build, so an ``Empty``
        controller never touches an external service.
    """

    def __init__(self, dependencies: PipelineDependencies | Callable[[], PipelineDependencies]) -> None:
        self._dependencies = dependencies
        self._snapshot: PipelineSnapshot | None = None
        self._version = 0
        self._build_lock = asyncio.Lock()

    # -- state ----------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return PipelineState.READY if self._snapshot is not None else PipelineState.EMPTY

    @property
    def snapshot(self) -> PipelineSnapshot | None:
        return self._snapshot

    def status(self) -> dict[str, Any]:
        snapshot = self._snapshot
        return {
            "state": (PipelineState.READY if snapshot else PipelineState.EMPTY).value,
            "version": snapshot.version if snapshot else None,
            "document": snapshot.document if snapshot else None,
            "passages": len(snapshot.index) if snapshot else 0,
        }

    # -- build ----------------------------------------------------------------

    @log_latency("pipeline.build")
    async def build(self, document: UploadedDocument) -> PipelineSnapshot:
        """Index *document* and make it the one answered from.

        Raises
        ------
        PipelineError
            Any stage failure; the previously installed snapshot (if
            any) stays active.
        """
        async with self._build_lock:
            try:
                snapshot = await self._build_snapshot(document)
            except PipelineError:
                logger.warning("Build of %s failed; keeping state %s", document.name, self.state.value)
                raise
            except Exception as exc:
                logger.exception("Unexpected failure while building %s", document.name)
                raise IndexBuildError(f"index build failed: {exc}") from exc

            self._snapshot = snapshot
            logger.info("Installed snapshot v%d for %s (%d passages)", snapshot.version, snapshot.document, len(snapshot.index))
            return snapshot

    async def _build_snapshot(self, document: UploadedDocument) -> PipelineSnapshot:
        deps = self._resolve_dependencies()
        config = deps.config

        text = await asyncio.to_thread(extract_text, document, upload_dir=config.upload_dir)
        passages = list(iter_passages(text, config.chunk_size, config.chunk_overlap))
        logger.info("Chunked %s into %d passage(s)", document.name, len(passages))

        vectors = await deps.embedder.embed_passages([p.text for p in passages])
        index = InMemoryVectorIndex.from_passages(passages, vectors, source=document.name)

        prompt = await asyncio.to_thread(load_prompt_template, config.prompt_hub_ref)
        generator = AnswerGenerator(deps.llm, prompt, timeout_s=config.generation_timeout_s)
        retriever = SemanticRetriever(index, deps.embedder, default_k=config.retrieval_k)
        graph = build_qa_graph(retriever, generator, k=config.retrieval_k, delimiter=config.context_delimiter)

        self._version += 1
        return PipelineSnapshot(
            version=self._version,
            document=document.name,
            index=index,
            graph=graph,
        )

    # -- query ----------------------------------------------------------------

    @log_latency("pipeline.ask")
    async def ask(self, question: str) -> QueryResult:
        """Answer *question* from the current snapshot.

        Raises
        ------
        NotReady
            No document has been indexed yet; no collaborator is called.
        InvalidQuestion
            *question* is blank.
        EmbeddingServiceError, GenerationServiceError
            The failing stage, so the caller can tell them apart.
        """
        snapshot = self._snapshot
        if snapshot is None:
            raise NotReady()
        if not question or not question.strip():
            raise InvalidQuestion()

        try:
            result = await snapshot.graph.ainvoke(create_initial_state(question))
        except PipelineError as exc:
            logger.warning("Query failed at stage %s: %s", exc.stage, exc.detail)
            raise
        except Exception as exc:
            logger.exception("Unexpected failure while answering")
            raise GenericProcessingError(f"query failed: {exc}", stage="query") from exc

        return QueryResult(answer=result["answer"], passages=result.get("passages", []), version=snapshot.version)

    # -- internals ------------------------------------------------------------

    def _resolve_dependencies(self) -> PipelineDependencies:
        if callable(self._dependencies) and not isinstance(self._dependencies, PipelineDependencies):
            self._dependencies = self._dependencies()
        return self._dependencies
