from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from paramsock.protocol.constants import DEFAULT_BUFFER_SIZE, MAX_FIELD_SIZE
from paramsock.protocol.framing import MissingStartPolicy

ENV_PREFIX = "PARAMSOCK_"


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


@dataclass
class Settings:
    """Connection settings (peer address, buffer sizing, decode policy, logging)."""

    host: str = "127.0.0.1"
    port: int = 8088
    buffer_size: int = DEFAULT_BUFFER_SIZE
    max_field_size: Optional[int] = MAX_FIELD_SIZE
    read_timeout: Optional[float] = None
    missing_start: str = MissingStartPolicy.FAIL.value
    strict: bool = False
    log_level: str = "INFO"


def load_settings(env_path: str = ".env") -> Settings:
    """Load settings from env/.env (``PARAMSOCK_PORT``, ``PARAMSOCK_BUFFER_SIZE`` ...)."""
    if Path(env_path).exists():
        load_dotenv(env_path)

    settings = Settings()
    for field in fields(Settings):
        raw = os.getenv(f"{ENV_PREFIX}{field.name.upper()}")
        if raw is not None:
            setattr(settings, field.name, _coerce(field.name, raw, getattr(settings, field.name)))

    _validate(settings)
    return settings


def _coerce(name: str, value: str, default: Any) -> Any:
    try:
        if name == "read_timeout":
            return float(value) if value.strip() else None
        if name == "max_field_size":
            # empty or 0 means unbounded
            return (int(value) or None) if value.strip() else None
        if isinstance(default, bool):
            return value.lower() in ("1", "true", "yes", "on")
        return type(default)(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {name}={value!r}") from exc


def _validate(settings: Settings) -> None:
    if not (1 <= settings.port <= 65535):
        raise ConfigError("port must be between 1 and 65535")
    if settings.buffer_size <= 0:
        raise ConfigError("buffer_size must be positive")
    if settings.max_field_size is not None and settings.max_field_size <= 0:
        raise ConfigError("max_field_size must be positive")
    if settings.read_timeout is not None and settings.read_timeout <= 0:
        raise ConfigError("read_timeout must be positive")
    try:
        MissingStartPolicy(settings.missing_start)
    except ValueError as exc:
        raise ConfigError(f"Unknown missing_start policy: {settings.missing_start}") from exc
    settings.log_level = settings.log_level.upper()


__all__ = ["ConfigError", "ENV_PREFIX", "Settings", "load_settings"]
