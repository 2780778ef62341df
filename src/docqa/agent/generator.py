"""Answer generation — prompt template piped into the chat model."""

from __future__ import annotations

import asyncio
import logging

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import BasePromptTemplate
from langchain_core.runnables import Runnable

from docqa.errors import GenerationServiceError

logger = logging.getLogger(__name__)


class AnswerGenerator:
    """Produce an answer for a question given a retrieved context string.

    Parameters
    ----------
    llm:
        Chat model (or any runnable taking a prompt value and returning
        a message).
    prompt:
        Template with ``question`` and ``context`` input variables.
    timeout_s:
        Upper bound for one generation call, in seconds.
    """

    def __init__(self, llm: Runnable, prompt: BasePromptTemplate, *, timeout_s: float = 120.0) -> None:
        self.timeout_s = timeout_s
        self._chain = prompt | llm | StrOutputParser()

    async def generate(self, question: str, context: str) -> str:
        try:
            answer = await asyncio.wait_for(
                self._chain.ainvoke({"question": question, "context": context}),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise GenerationServiceError(f"generation timed out after {self.timeout_s}s") from exc
        except Exception as exc:
            logger.exception("Generation failed")
            raise GenerationServiceError(f"generation failed: {exc}") from exc
        return answer.strip()
