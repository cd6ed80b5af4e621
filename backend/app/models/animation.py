"""Animation domain models: model output, parameters, conversation, stored record."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnimationParams(BaseModel):
    duration: float = Field(default=1.0, ge=0.1, le=10)  # seconds
    easing: Literal["linear", "ease", "ease-in", "ease-out", "ease-in-out"] = "ease"
    repeat: int = Field(default=0, ge=0)
    direction: Literal["normal", "reverse", "alternate"] = "normal"


class AnimationElement(BaseModel):
    """SMIL fragments the model wants appended to one element."""

    element_id: str = Field(alias="elementId")
    animations: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class GenerationPayload(BaseModel):
    """Structured model output: {animations, parameters, explanation}."""

    animations: list[AnimationElement] = Field(default_factory=list)
    parameters: dict = Field(default_factory=dict)  # validated separately, may be partial
    explanation: str = ""


class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utcnow)


class AnimationRecord(BaseModel):
    """One generation: inputs, latest result or error, and the conversation so far."""

    id: int
    original_svg: str
    description: str
    selected_elements: list[str] = Field(default_factory=list)
    reference_elements: list[str] = Field(default_factory=list)
    animated_svg: str | None = None
    error: str | None = None
    parameters: AnimationParams = Field(default_factory=AnimationParams)
    conversation: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
