"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.models.animation import AnimationParams


class PreviewRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG code")
    selected_elements: list[str] = Field(..., description="Ids of the elements to preview, in order")
    translate_to_origin: bool = Field(
        default=False,
        description="Wrap the selection in a group translated to the origin instead of offsetting the viewBox",
    )


class CreateAnimationRequest(BaseModel):
    original_svg: str = Field(..., description="Raw SVG code")
    description: str = Field(..., min_length=1, description="Desired motion in natural language")
    selected_elements: list[str] = Field(default_factory=list, description="Ids of the elements to animate")
    reference_elements: list[str] = Field(
        default_factory=list,
        description="Ids of elements kept static, used only as spatial anchors",
    )
    parameters: AnimationParams | None = None


class UpdateAnimationRequest(BaseModel):
    description: str = Field(..., min_length=1, description="Follow-up instruction")
    parameters: AnimationParams | None = None
