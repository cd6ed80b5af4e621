"""POST /api/svg/preview: standalone preview of the selected elements."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.config import Settings
from app.dependencies import get_settings
from app.errors import InputTooLarge
from app.models.requests import PreviewRequest
from app.models.responses import PreviewResponse
from app.svg.extractor import ExtractOptions, extract_subset

router = APIRouter()


@router.post("/svg/preview", response_model=PreviewResponse)
async def preview(req: PreviewRequest, settings: Settings = Depends(get_settings)) -> PreviewResponse:
    if len(req.svg) > settings.max_svg_chars:
        raise InputTooLarge(len(req.svg), settings.max_svg_chars)

    options = ExtractOptions(
        padding_ratio=settings.preview_padding_ratio,
        translate_to_origin=req.translate_to_origin,
        highlight_marker=settings.highlight_marker_attr,
    )
    svg, debug = extract_subset(req.svg, req.selected_elements, options)
    return PreviewResponse(preview=svg, debug=debug)
