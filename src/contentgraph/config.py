"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `CONTENTGRAPH_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """contentgraph settings.

    All fields are environment-configurable. Prefix is `CONTENTGRAPH_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONTENTGRAPH_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    log_level: str = Field(default="INFO")

    # Ingestion
    chapter_heading_level: int = Field(default=1, ge=1, le=5)

    # Planner
    default_effort: float = Field(default=1.0, gt=0.0)

    # Parallel runs over independent documents
    max_concurrent: int = Field(default=4, ge=1, le=64)

    # Artifacts
    record_events: bool = Field(default=False)
    artifacts_dir: Path = Field(default=Path("artifacts"))


def _env_file() -> Path | None:
    override = os.getenv("CONTENTGRAPH_ENV_FILE")
    if override:
        return Path(override)
    default_env = Path.cwd() / ".env"
    return default_env if default_env.exists() else None


def load_settings(**overrides: Any) -> Settings:
    """Load settings from env, then apply explicit overrides.

    Args:
        overrides: Field values taking precedence over env and `.env` (e.g. CLI options).
            `None` values are ignored.

    Returns:
        Settings: Parsed settings.

    Raises:
        pydantic.ValidationError: An env value or override is out of range.
    """

    explicit = {k: v for k, v in overrides.items() if v is not None}
    return Settings(_env_file=_env_file(), **explicit)
