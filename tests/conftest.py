"""Shared pytest configuration and fixtures.

Every collaborator that would reach the network is replaced by a
deterministic fake:

* :class:`KeywordEmbeddings` — one vector dimension per vocabulary word,
  valued by how often the word occurs.
* :class:`EchoChatModel` — answers with the context it was given, so
  tests can see exactly which passages reached the prompt.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from langchain_core.embeddings import Embeddings
from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

from docqa.config import Settings
from docqa.ingestion.embedder import Embedder
from docqa.pipeline.controller import PipelineController, PipelineDependencies
from docqa.pipeline.sessions import SessionRegistry
from docqa.serving.app import create_app

VOCABULARY = ["cat", "dog", "river", "bridge", "warranty", "engine", "tea", "paris"]


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ──────────────────────────────────────────────────────────────


class KeywordEmbeddings(Embeddings):
    """Bag-of-keywords embeddings over :data:`VOCABULARY`."""

    def __init__(self) -> None:
        self.document_calls = 0
        self.query_calls = 0
        self.fail = False

    def _vector(self, text: str) -> list[float]:
        lowered = text.lower()
        return [float(lowered.count(word)) for word in VOCABULARY]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls += 1
        if self.fail:
            raise RuntimeError("embedding backend unavailable")
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.query_calls += 1
        if self.fail:
            raise RuntimeError("embedding backend unavailable")
        return self._vector(text)

    @property
    def calls(self) -> int:
        return self.document_calls + self.query_calls


class EchoChatModel:
    """Chat-model stand-in whose answer is the prompt's context section."""

    def __init__(self) -> None:
        self.calls = 0
        self.fail = False
        self.runnable = RunnableLambda(self._respond)

    def _respond(self, prompt_value) -> AIMessage:  # noqa: ANN001
        self.calls += 1
        if self.fail:
            raise RuntimeError("chat backend unavailable")
        text = prompt_value.to_string()
        context = text.split("Context:", 1)[1].rsplit("Answer:", 1)[0].strip()
        return AIMessage(content=context)


def make_pdf(text: str) -> bytes:
    """Build a one-page PDF showing *text* in Helvetica (no parentheses)."""
    stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def test_settings(tmp_path) -> Settings:  # noqa: ANN001
    return Settings(
        _env_file=None,
        chunk_size=200,
        chunk_overlap=40,
        retrieval_k=2,
        embedding_batch_size=4,
        upload_dir=str(tmp_path / "uploads"),
        prompt_hub_ref="",
    )


@pytest.fixture()
def fake_embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture()
def fake_llm() -> EchoChatModel:
    return EchoChatModel()


@pytest.fixture()
def dependencies(
    fake_embeddings: KeywordEmbeddings,
    fake_llm: EchoChatModel,
    test_settings: Settings,
) -> PipelineDependencies:
    return PipelineDependencies(
        embedder=Embedder(fake_embeddings, batch_size=test_settings.embedding_batch_size, timeout_s=5.0),
        llm=fake_llm.runnable,
        config=test_settings,
    )


@pytest.fixture()
def controller(dependencies: PipelineDependencies) -> PipelineController:
    return PipelineController(dependencies)


@pytest.fixture()
def registry(dependencies: PipelineDependencies) -> SessionRegistry:
    return SessionRegistry(lambda: dependencies, max_sessions=10)


@pytest.fixture()
def client(registry: SessionRegistry, test_settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(test_settings, registry=registry)) as test_client:
        yield test_client


@pytest.fixture()
def pdf_factory() -> Callable[[str], bytes]:
    return make_pdf
