"""Unit tests for the question-answering graph.

All tests run **without** network access by injecting the keyword
embeddings and echo chat model from ``conftest``.  The suite covers:

- Prompt construction and context assembly
- The answer generator (success, failure, timeout)
- Individual nodes (retrieve, generate)
- Graph compilation, topology and end-to-end invocation
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

from docqa.agent.generator import AnswerGenerator
from docqa.agent.graph import PIPELINE_STAGES, build_graph, build_qa_graph, create_initial_state
from docqa.agent.nodes import make_generate_node, make_retrieve_node
from docqa.agent.prompts import build_rag_prompt, format_context, load_prompt_template
from docqa.errors import GenerationServiceError
from docqa.ingestion.embedder import Embedder
from docqa.ingestion.models import Passage
from docqa.retrieval.memory_store import InMemoryVectorIndex
from docqa.retrieval.models import Citation, RetrievalResult
from docqa.retrieval.retriever import SemanticRetriever

# ── Fixtures & helpers ─────────────────────────────────────────────────

TEXTS = [
    "The cat sleeps all afternoon.",
    "The old bridge crosses the river.",
    "Tea is served in Paris at four.",
]


@pytest.fixture()
def retriever(fake_embeddings) -> SemanticRetriever:  # noqa: ANN001
    passages = [Passage(text=t, index=i, start=0) for i, t in enumerate(TEXTS)]
    vectors = [fake_embeddings.embed_query(t) for t in TEXTS]
    index = InMemoryVectorIndex.from_passages(passages, vectors, source="facts.txt")
    return SemanticRetriever(index, Embedder(fake_embeddings), default_k=2)


@pytest.fixture()
def generator(fake_llm) -> AnswerGenerator:  # noqa: ANN001
    return AnswerGenerator(fake_llm.runnable, build_rag_prompt(), timeout_s=5.0)


def _result(content: str, i: int) -> RetrievalResult:
    return RetrievalResult(content=content, citation=Citation(source="x", chunk_index=i))


# ═══════════════════════════════════════════════════════════════════════
# Prompt construction
# ═══════════════════════════════════════════════════════════════════════


class TestPrompts:
    def test_rag_prompt_has_question_and_context(self) -> None:
        prompt = build_rag_prompt()
        assert set(prompt.input_variables) == {"question", "context"}

    def test_rag_prompt_renders_both(self) -> None:
        messages = build_rag_prompt().format_messages(question="Why?", context="Because.")
        assert len(messages) == 1
        assert "Question: Why?" in messages[0].content
        assert "Context: Because." in messages[0].content

    def test_empty_hub_ref_uses_builtin(self) -> None:
        assert load_prompt_template("").input_variables == build_rag_prompt().input_variables

    def test_format_context_keeps_order_and_delimiter(self) -> None:
        results = [_result("second best", 1), _result("best", 0)]
        assert format_context(results, delimiter="\n---\n") == "second best\n---\nbest"

    def test_format_context_empty(self) -> None:
        assert format_context([]) == ""


# ═══════════════════════════════════════════════════════════════════════
# Answer generator
# ═══════════════════════════════════════════════════════════════════════


class TestAnswerGenerator:
    def test_generates_from_context(self, generator: AnswerGenerator) -> None:
        answer = asyncio.run(generator.generate("What sleeps?", "The cat sleeps."))
        assert answer == "The cat sleeps."

    def test_failure_becomes_generation_service_error(self, generator: AnswerGenerator, fake_llm) -> None:  # noqa: ANN001
        fake_llm.fail = True
        with pytest.raises(GenerationServiceError) as excinfo:
            asyncio.run(generator.generate("q", "c"))
        assert excinfo.value.stage == "generate"

    def test_timeout_becomes_generation_service_error(self) -> None:
        async def _slow(_: Any) -> AIMessage:
            await asyncio.sleep(5)
            return AIMessage(content="late")

        slow = AnswerGenerator(RunnableLambda(_slow), build_rag_prompt(), timeout_s=0.05)
        with pytest.raises(GenerationServiceError, match="timed out"):
            asyncio.run(slow.generate("q", "c"))


# ═══════════════════════════════════════════════════════════════════════
# Nodes
# ═══════════════════════════════════════════════════════════════════════


class TestNodes:
    def test_retrieve_sets_passages_and_context(self, retriever: SemanticRetriever) -> None:
        node = make_retrieve_node(retriever, delimiter=" | ")
        update = asyncio.run(node(create_initial_state("Tell me about the river")))

        assert set(update) == {"passages", "context"}
        assert update["passages"][0].content == TEXTS[1]
        assert update["context"].startswith(TEXTS[1] + " | ")

    def test_generate_sets_answer_only(self, generator: AnswerGenerator) -> None:
        node = make_generate_node(generator)
        state = {**create_initial_state("q"), "context": "Some context."}
        assert asyncio.run(node(state)) == {"answer": "Some context."}


# ═══════════════════════════════════════════════════════════════════════
# Graph
# ═══════════════════════════════════════════════════════════════════════


class TestGraph:
    def test_default_stages(self) -> None:
        assert PIPELINE_STAGES == ("retrieve", "generate")

    def test_compiled_topology(self, retriever: SemanticRetriever, generator: AnswerGenerator) -> None:
        graph = build_qa_graph(retriever, generator)
        edges = {(e.source, e.target) for e in graph.get_graph().edges}
        assert edges == {("__start__", "retrieve"), ("retrieve", "generate"), ("generate", "__end__")}

    def test_end_to_end(self, retriever: SemanticRetriever, generator: AnswerGenerator) -> None:
        graph = build_qa_graph(retriever, generator, k=1)
        result = asyncio.run(graph.ainvoke(create_initial_state("Where is tea served?")))

        assert result["answer"] == TEXTS[2]
        assert [p.content for p in result["passages"]] == [TEXTS[2]]

    def test_nearest_passage_comes_first_in_context(
        self, retriever: SemanticRetriever, generator: AnswerGenerator
    ) -> None:
        graph = build_qa_graph(retriever, generator, k=2, delimiter="\n")
        result = asyncio.run(graph.ainvoke(create_initial_state("Does the cat sleep?")))
        assert result["answer"].split("\n")[0] == TEXTS[0]

    def test_custom_stage_list(self, retriever: SemanticRetriever, generator: AnswerGenerator) -> None:
        async def shout(state):  # noqa: ANN001, ANN202
            return {"answer": state["answer"].upper()}

        graph = build_graph(
            [
                ("retrieve", make_retrieve_node(retriever, k=1)),
                ("generate", make_generate_node(generator)),
                ("shout", shout),
            ]
        )
        result = asyncio.run(graph.ainvoke(create_initial_state("cat?")))
        assert result["answer"] == TEXTS[0].upper()

    def test_empty_stage_list_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_graph([])

    def test_generation_error_propagates_from_graph(
        self, retriever: SemanticRetriever, generator: AnswerGenerator, fake_llm  # noqa: ANN001
    ) -> None:
        fake_llm.fail = True
        graph = build_qa_graph(retriever, generator)
        with pytest.raises(GenerationServiceError):
            asyncio.run(graph.ainvoke(create_initial_state("cat?")))
