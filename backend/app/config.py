"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    animator_env: str = "development"
    animator_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Model routing
    model_cheap: str = "claude-haiku-4-5-20251001"
    model_mid: str = "claude-sonnet-4-5-20250929"
    model_frontier: str = "claude-sonnet-4-5-20250929"
    llm_max_tokens: int = 4096

    # Input ceiling enforced before the model is called (characters of SVG text)
    max_svg_chars: int = 200_000

    # Preview
    preview_padding_ratio: float = 0.1
    highlight_marker_attr: str = "data-original-style"

    # Record store; empty keeps records in memory only
    data_dir: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
