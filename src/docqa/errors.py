"""Exception hierarchy shared by the ingestion, retrieval and serving layers.

Every error carries the HTTP ``status_code`` it maps to, the short
``public_message`` returned to API callers, and the pipeline ``stage``
it belongs to, so a caller can tell which step of the pipeline failed
(e.g. embedding succeeded but generation did not).
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for every error the pipeline surfaces to callers."""

    status_code: int = 500
    public_message: str = "Processing failed."
    stage: str = "pipeline"

    def __init__(self, detail: str = "", *, stage: str | None = None) -> None:
        super().__init__(detail or self.public_message)
        self.detail = detail or self.public_message
        if stage is not None:
            self.stage = stage


# ── Build phase ───────────────────────────────────────────────────────


class NoFileProvided(PipelineError):
    status_code = 400
    public_message = "No file uploaded."
    stage = "upload"


class UnsupportedFormat(PipelineError):
    status_code = 400
    public_message = "Unsupported file format. Upload a PDF or plain-text document."
    stage = "ingest"


class ExtractionError(PipelineError):
    stage = "ingest"


class EmbeddingServiceError(PipelineError):
    stage = "embed"


class IndexBuildError(PipelineError):
    stage = "index"


# ── Query phase ───────────────────────────────────────────────────────


class NotReady(PipelineError):
    status_code = 400
    public_message = "Graph not initialized. Upload a file first."
    stage = "retrieve"


class InvalidQuestion(PipelineError):
    status_code = 400
    public_message = "Request body must be JSON with a non-empty 'question' string."
    stage = "retrieve"


class GenerationServiceError(PipelineError):
    public_message = "Failed to retrieve answer."
    stage = "generate"


class GenericProcessingError(PipelineError):
    """Catch-all for failures that do not belong to a specific stage."""
