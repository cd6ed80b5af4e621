"""/api/animations: create, refine and fetch animation records."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.config import Settings
from app.dependencies import get_llm, get_settings, get_store
from app.errors import AnimatorError, InputTooLarge
from app.llm.client import AnimationLLM
from app.models.animation import AnimationRecord, Message
from app.models.requests import CreateAnimationRequest, UpdateAnimationRequest
from app.services.animator import AnimationRequest, generate_animation
from app.services.store import AnimationStore

router = APIRouter(prefix="/animations")
logger = logging.getLogger(__name__)


async def _generate(
    record_id: int,
    request: AnimationRequest,
    llm: AnimationLLM,
    store: AnimationStore,
    settings: Settings,
    task: str,
) -> AnimationRecord | JSONResponse:
    """Run one generation and store its outcome. Failures are stored and answered with the record."""
    user_turn = Message(role="user", content=request.description)
    try:
        result = await generate_animation(request, llm, settings, task=task)
    except AnimatorError as e:
        record = store.save_error(record_id, e.message, [user_turn])
        return JSONResponse(status_code=e.status_code, content=record.model_dump(mode="json"))
    except Exception as e:
        logger.exception("Animation generation failed for record %d", record_id)
        record = store.save_error(record_id, f"Failed to generate animation: {e}", [user_turn])
        return JSONResponse(status_code=502, content=record.model_dump(mode="json"))

    if result.skipped:
        logger.info("Record %d: skipped animations for %s", record_id, ", ".join(result.skipped))

    return store.save_result(
        record_id,
        animated_svg=result.animated_svg,
        parameters=result.parameters,
        turns=[user_turn, Message(role="assistant", content=result.explanation)],
    )


@router.post("", response_model=AnimationRecord)
async def create_animation(
    req: CreateAnimationRequest,
    llm: AnimationLLM = Depends(get_llm),
    store: AnimationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    if len(req.original_svg) > settings.max_svg_chars:
        raise InputTooLarge(len(req.original_svg), settings.max_svg_chars)

    record = store.create(
        original_svg=req.original_svg,
        description=req.description,
        selected_elements=req.selected_elements,
        reference_elements=req.reference_elements,
        parameters=req.parameters,
    )
    request = AnimationRequest(
        svg=req.original_svg,
        selected_elements=req.selected_elements,
        description=req.description,
        reference_elements=req.reference_elements,
        parameters=req.parameters,
    )
    return await _generate(record.id, request, llm, store, settings, task="animate")


@router.patch("/{animation_id}", response_model=AnimationRecord)
async def update_animation(
    animation_id: int,
    req: UpdateAnimationRequest,
    llm: AnimationLLM = Depends(get_llm),
    store: AnimationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    record = store.get(animation_id)
    request = AnimationRequest(
        svg=record.original_svg,
        selected_elements=record.selected_elements,
        description=req.description,
        reference_elements=record.reference_elements,
        parameters=req.parameters or record.parameters,
        conversation=record.conversation,
    )
    return await _generate(record.id, request, llm, store, settings, task="refine")


@router.get("/{animation_id}", response_model=AnimationRecord)
async def get_animation(animation_id: int, store: AnimationStore = Depends(get_store)) -> AnimationRecord:
    return store.get(animation_id)
