"""LangChain ChatAnthropic wrapper.

An ``AnimationLLM`` is built once from settings and handed to the
orchestration layer through FastAPI dependency injection; nothing in the SVG
core talks to the model.
"""

from __future__ import annotations

import logging
from typing import Any

from app.config import Settings
from app.errors import LLMNotConfigured
from app.llm.model_router import get_model_for_task
from app.models.animation import Message

logger = logging.getLogger(__name__)


def _content_text(content: Any) -> str:
    """Flatten a LangChain message content (str or list of blocks) to text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class AnimationLLM:
    """Text-generation collaborator: system prompt + history + question -> raw text."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._chat_models: dict[str, Any] = {}

    @property
    def configured(self) -> bool:
        return bool(self.settings.anthropic_api_key)

    def _chat_model(self, task: str):
        from langchain_anthropic import ChatAnthropic

        model_id = get_model_for_task(task, self.settings)
        if model_id not in self._chat_models:
            self._chat_models[model_id] = ChatAnthropic(
                model=model_id,
                api_key=self.settings.anthropic_api_key,
                max_tokens=self.settings.llm_max_tokens,
            )
        return self._chat_models[model_id]

    async def complete(
        self,
        system: str,
        question: str,
        history: list[Message] | None = None,
        task: str = "animate",
    ) -> str:
        if not self.configured:
            raise LLMNotConfigured()

        from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

        messages: list = [SystemMessage(content=system)]
        for msg in history or []:
            if msg.role == "user":
                messages.append(HumanMessage(content=msg.content))
            elif msg.role == "assistant":
                messages.append(AIMessage(content=msg.content))
        messages.append(HumanMessage(content=question))

        llm = self._chat_model(task)
        logger.info("LLM request: task=%s, %d messages", task, len(messages))
        response = await llm.ainvoke(messages)
        return _content_text(response.content)
