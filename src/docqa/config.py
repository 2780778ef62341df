"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    llm_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("llm_api_key", "groq_api_key", "openai_api_key"),
        description="API key for the chat-completion endpoint",
    )
    llm_model_name: str = Field(default="llama-3.3-70b-versatile", description="LLM model identifier")
    llm_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description=(
            "Base URL of an OpenAI-compatible chat-completion API. "
            "Leave empty to use the OpenAI cloud."
        ),
    )
    llm_temperature: float = 0.0

    # Embedding
    embedding_provider: str = Field(default="openai", description="'openai' (hosted) or 'huggingface' (local)")
    embedding_model: str = "text-embedding-3-small"
    embedding_api_key: str = ""
    embedding_base_url: str = ""
    embedding_batch_size: int = 64

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # Retrieval
    retrieval_k: int = Field(default=4, ge=1)
    context_delimiter: str = "\n\n"

    # Prompt: a LangChain Hub reference such as "rlm/rag-prompt"; empty uses the built-in template.
    prompt_hub_ref: str = ""

    # Timeouts (seconds)
    embedding_timeout_s: float = 60.0
    generation_timeout_s: float = 120.0

    # Serving
    host: str = "0.0.0.0"
    port: int = 3001
    upload_dir: str = "temp_files"
    max_sessions: int = Field(default=100, ge=1)
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "populate_by_name": True}


# Singleton: import `settings` wherever needed.
settings = Settings()
