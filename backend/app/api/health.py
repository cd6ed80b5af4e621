"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_llm
from app.llm.client import AnimationLLM
from app.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(llm: AnimationLLM = Depends(get_llm)) -> HealthResponse:
    return HealthResponse(status="ok", version="0.1.0", llm_configured=llm.configured)


@router.get("/prompts")
async def prompts() -> dict[str, str]:
    """Raw system prompt templates, keyed by task."""
    from app.llm.prompts import get_all_templates

    return get_all_templates()
