"""LLM initialisation — single place to swap providers.

The chat model is any OpenAI-compatible ``/v1/chat/completions``
endpoint, so ``ChatOpenAI`` covers:

1. **Groq** (default) — ``LLM_BASE_URL=https://api.groq.com/openai/v1``
   with ``GROQ_API_KEY``.
2. **OpenAI cloud** — set ``LLM_BASE_URL`` to an empty string.
3. **Self-hosted vLLM / Ollama** — point ``LLM_BASE_URL`` at the server.
"""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

from docqa.config import Settings, settings

logger = logging.getLogger(__name__)


def get_llm(config: Settings = settings, temperature: float | None = None) -> ChatOpenAI:
    """Return the configured chat model."""
    kwargs: dict = {
        "model": config.llm_model_name,
        "temperature": config.llm_temperature if temperature is None else temperature,
    }

    if config.llm_base_url:
        logger.info("Using chat-completion endpoint: %s", config.llm_base_url)
        kwargs["base_url"] = config.llm_base_url
    if config.llm_api_key:
        kwargs["api_key"] = config.llm_api_key

    return ChatOpenAI(**kwargs)
