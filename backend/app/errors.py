"""Typed failures raised by the SVG core and the orchestration layer.

Every error carries a human-readable message and the HTTP status the API
layer answers with. Nothing in the core retries; callers decide.
"""

from __future__ import annotations


class AnimatorError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseError(AnimatorError):
    """Input text is not parseable as SVG/XML."""

    status_code = 400


class StructuralError(AnimatorError):
    """Parseable, but there is no root <svg> element."""

    status_code = 400


class NoElementsFound(AnimatorError):
    """None of the requested element ids resolved."""

    status_code = 404

    def __init__(self, element_ids: list[str]) -> None:
        super().__init__(f"No selected elements found (requested: {', '.join(element_ids) or 'none'})")
        self.element_ids = element_ids


class FragmentParseError(AnimatorError):
    """An animation fragment from the model is not valid SMIL markup."""

    status_code = 502

    def __init__(self, element_id: str, fragment: str, reason: str) -> None:
        super().__init__(f"Invalid animation fragment for #{element_id}: {reason}")
        self.element_id = element_id
        self.fragment = fragment
        self.reason = reason


class UnrepairableOutput(AnimatorError):
    """Model output cannot be reconciled into a complete SVG document."""

    status_code = 502


class InputTooLarge(AnimatorError):
    status_code = 413

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"SVG is {size} characters, limit is {limit}")
        self.size = size
        self.limit = limit


class LLMNotConfigured(AnimatorError):
    status_code = 503

    def __init__(self) -> None:
        super().__init__("LLM not configured, set ANTHROPIC_API_KEY in .env")


class RecordNotFound(AnimatorError):
    status_code = 404

    def __init__(self, record_id: int) -> None:
        super().__init__(f"Animation {record_id} not found")
        self.record_id = record_id
