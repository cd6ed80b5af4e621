"""FastAPI dependency injection."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from app.config import settings
from app.llm.client import AnimationLLM
from app.services.store import AnimationStore


def get_settings():
    return settings


@lru_cache
def get_llm() -> AnimationLLM:
    return AnimationLLM(settings)


@lru_cache
def get_store() -> AnimationStore:
    return AnimationStore(Path(settings.data_dir) if settings.data_dir else None)
