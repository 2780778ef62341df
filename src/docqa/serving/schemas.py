"""Request / response schemas for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RetrieveRequest(BaseModel):
    """Incoming question from the user."""

    question: str = Field(min_length=1)


class RetrieveResponse(BaseModel):
    """Answer returned by the query graph."""

    answer: str


class UploadResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class StatusResponse(BaseModel):
    """Current pipeline state for the caller's session."""

    state: str
    version: int | None = None
    document: str | None = None
    passages: int = 0
