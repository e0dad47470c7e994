from __future__ import annotations

import logging
import os
from typing import Any, Dict

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console
from rich.logging import RichHandler

from .render import SizeHint

logger = logging.getLogger(__name__)

ENV_PREFIX = "STORAGE_WIDGET_"
DEFAULT_REFRESH_MINUTES = 15
# QTimer intervals are 32-bit milliseconds
MAX_REFRESH_MINUTES = 24 * 60


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, frozen=True)

    refresh_minutes: int = Field(DEFAULT_REFRESH_MINUTES, gt=0, le=MAX_REFRESH_MINUTES)
    size: SizeHint = SizeHint.MEDIUM
    log_level: str = "WARNING"

    @field_validator("size", mode="before")
    @classmethod
    def _parse_size(cls, value: Any) -> Any:
        if isinstance(value, str):
            return SizeHint.parse(value)
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _check_log_level(cls, value: Any) -> str:
        level = str(value).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_env(cls) -> "Config":
        """Read STORAGE_WIDGET_* variables, keeping defaults for bad values."""
        try:
            return cls()
        except ValidationError as exc:
            bad = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        overrides: Dict[str, Any] = {}
        for name in bad:
            env_name = f"{ENV_PREFIX}{name.upper()}"
            logger.warning("Ignoring %s=%r", env_name, os.environ.get(env_name))
            overrides[name] = cls.model_fields[name].default
        return cls(**overrides)


def configure_logging(level: str = "WARNING") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
