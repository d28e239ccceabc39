"""Process-level settings for docspine.

Only logging is configured here.  Engine connections belong to the
application that owns the persistence engine; gateways receive an already
connected ``model`` handle.

Examples:
    >>> from docspine.core.settings import DocspineSettings
    >>> settings = DocspineSettings(log_level="DEBUG")
    >>> settings.service_name
    'docspine'

Tags:
    settings, configuration, pydantic, environment, docspine
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocspineSettings(BaseSettings):
    """Settings read from ``DOCSPINE_*`` environment variables and ``.env``.

    Fields
    ──────
    log_level     : Structlog log level
    log_json      : JSON output (True), console (False), auto-detect (None)
    service_name  : Value of ``service.name`` on every log event
    debug         : Shortcut that forces DEBUG logging
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = Field(default="docspine", min_length=1)
    debug: bool = False

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level
