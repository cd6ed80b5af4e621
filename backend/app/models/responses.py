"""API response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    llm_configured: bool = False


class PreviewResponse(BaseModel):
    preview: str
    debug: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str
    type: str = ""
