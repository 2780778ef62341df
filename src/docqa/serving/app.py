"""FastAPI application exposing the upload → ask workflow as a REST API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, File, Header, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docqa.config import Settings, settings
from docqa.errors import InvalidQuestion, NoFileProvided, NotReady, PipelineError
from docqa.ingestion.models import UploadedDocument
from docqa.logging_config import setup_logging
from docqa.pipeline.controller import PipelineController
from docqa.pipeline.sessions import SessionRegistry
from docqa.serving.schemas import (
    ErrorResponse,
    RetrieveRequest,
    RetrieveResponse,
    StatusResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/uploadFile"
UPLOAD_OK = "File processed and graph initialized."
BUILD_FAILED = "Processing failed."
QUERY_FAILED = "Failed to retrieve answer."

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}

router = APIRouter()


# ── Dependencies ──────────────────────────────────────────────────────


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_controller(
    registry: SessionRegistry = Depends(get_registry),
    x_session_id: str | None = Header(default=None),
) -> PipelineController:
    """Resolve (or create) the caller's controller from the ``X-Session-ID`` header."""
    return registry.get(x_session_id)


def find_controller(
    registry: SessionRegistry = Depends(get_registry),
    x_session_id: str | None = Header(default=None),
) -> PipelineController | None:
    """Look up the caller's controller without creating a session."""
    return registry.peek(x_session_id)


def _error(exc: PipelineError, *, fallback: str | None = None) -> JSONResponse:
    """Render *exc* as ``{"error": ...}``; server errors get *fallback*."""
    message = exc.public_message
    if exc.status_code >= 500 and fallback is not None:
        message = fallback
    logger.log(
        logging.WARNING if exc.status_code < 500 else logging.ERROR,
        "%s at stage %s: %s",
        type(exc).__name__,
        exc.stage,
        exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": message})


# ── Routes ────────────────────────────────────────────────────────────


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/api/status", response_model=StatusResponse)
async def status(controller: PipelineController | None = Depends(find_controller)) -> StatusResponse:
    """Report whether the caller's session has an index loaded."""
    if controller is None:
        return StatusResponse(state="empty", version=None, document=None, passages=0)
    return StatusResponse(**controller.status())


@router.post(UPLOAD_PATH, response_model=UploadResponse, responses=ERROR_RESPONSES)
async def upload_file(
    document: UploadFile | None = File(default=None),
    controller: PipelineController = Depends(get_controller),
):
    """Index the uploaded document, replacing any previous one."""
    if document is None or not document.filename:
        return _error(NoFileProvided())

    uploaded = UploadedDocument(
        name=document.filename,
        content=await document.read(),
        content_type=document.content_type,
    )
    try:
        await controller.build(uploaded)
    except PipelineError as exc:
        return _error(exc, fallback=BUILD_FAILED)
    return UploadResponse(message=UPLOAD_OK)


@router.post("/api/retrieve", response_model=RetrieveResponse, responses=ERROR_RESPONSES)
async def retrieve(
    body: RetrieveRequest,
    controller: PipelineController | None = Depends(find_controller),
):
    """Answer a question from the currently indexed document."""
    if controller is None:
        return _error(NotReady())
    try:
        result = await controller.ask(body.question)
    except PipelineError as exc:
        return _error(exc, fallback=QUERY_FAILED)
    return RetrieveResponse(answer=result.answer)


# ── Exception handlers ────────────────────────────────────────────────


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    message = NoFileProvided.public_message if request.url.path == UPLOAD_PATH else InvalidQuestion.public_message
    return JSONResponse(status_code=400, content={"error": message})


async def _handle_pipeline_error(request: Request, exc: PipelineError) -> JSONResponse:
    return _error(exc)


# ── Application factory ───────────────────────────────────────────────


def create_app(config: Settings = settings, registry: SessionRegistry | None = None) -> FastAPI:
    """Build the application.

    Parameters
    ----------
    config:
        Settings used for logging and, when *registry* is omitted, for
        the collaborators of every session.
    registry:
        Pre-built session registry (tests inject one with fakes).
    """
    setup_logging(config.log_level)

    app = FastAPI(
        title="docqa",
        version="0.1.0",
        description="Upload a document, then ask questions answered from its passages.",
    )
    app.state.registry = registry if registry is not None else SessionRegistry.from_settings(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(PipelineError, _handle_pipeline_error)
    app.include_router(router)
    return app


app = create_app()
