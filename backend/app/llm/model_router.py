"""Task to model selection. Mid-tier for first generations, cheap tier for follow-up refinements."""

from __future__ import annotations

from app.config import Settings, settings as default_settings

_TASK_MODEL_MAP = {
    "animate": "mid",
    "refine": "cheap",
}


def get_model_for_task(task: str, settings: Settings | None = None) -> str:
    settings = settings or default_settings
    tier = _TASK_MODEL_MAP.get(task, "mid")
    if tier == "cheap":
        return settings.model_cheap
    elif tier == "mid":
        return settings.model_mid
    else:
        return settings.model_frontier
