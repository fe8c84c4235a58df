# file: phonedial/config.py
"""
Configuration loader.

Precedence (highest to lowest):
1. OS environment variables
2. `.env` values
3. YAML config file values
4. Code defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field, model_validator
from pydantic import ConfigDict as PydanticConfigDict

from phonedial.core.localtime import BUSINESS_END_HOUR, BUSINESS_START_HOUR
from phonedial.history import DEFAULT_CAPACITY


class PhonedialSettings(BaseModel):
    model_config = PydanticConfigDict(extra="ignore")

    # General
    log_level: str = "INFO"
    json_logging: bool = False

    # Reference data overrides (bundled data when unset)
    countries_path: Path | None = None
    grouping_path: Path | None = None

    # History
    history_enabled: bool = True
    history_path: Path = Path(".cache/phonedial-history.sqlite3")
    history_capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)

    # Local time
    business_start_hour: int = Field(default=BUSINESS_START_HOUR, ge=0, le=24)
    business_end_hour: int = Field(default=BUSINESS_END_HOUR, ge=0, le=24)

    # WhatsApp
    default_message: str | None = None

    @model_validator(mode="after")
    def _check_business_window(self) -> "PhonedialSettings":
        if self.business_start_hour >= self.business_end_hour:
            raise ValueError("business_start_hour must be before business_end_hour")
        return self


_ENV_MAP: dict[str, str] = {
    "PHONEDIAL_LOG_LEVEL": "log_level",
    "PHONEDIAL_JSON_LOGGING": "json_logging",
    "PHONEDIAL_COUNTRIES_PATH": "countries_path",
    "PHONEDIAL_GROUPING_PATH": "grouping_path",
    "PHONEDIAL_HISTORY_ENABLED": "history_enabled",
    "PHONEDIAL_HISTORY_PATH": "history_path",
    "PHONEDIAL_HISTORY_CAPACITY": "history_capacity",
    "PHONEDIAL_BUSINESS_START_HOUR": "business_start_hour",
    "PHONEDIAL_BUSINESS_END_HOUR": "business_end_hour",
    "PHONEDIAL_DEFAULT_MESSAGE": "default_message",
}


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    return raw if isinstance(raw, dict) else {}


def _read_dotenv(path: Path) -> dict[str, str]:
    # dotenv_values parses only; os.environ is left untouched.
    values = dotenv_values(path)
    return {k: v for k, v in values.items() if isinstance(k, str) and isinstance(v, str)}


def _overlay_env(target: dict[str, Any], env: dict[str, str]) -> None:
    for env_key, field_name in _ENV_MAP.items():
        if env_key in env:
            target[field_name] = env[env_key]


def load_settings(
    *, yaml_path: Path | None = None, env_path: Path | None = None
) -> PhonedialSettings:
    """
    Load settings from YAML and .env, with OS env overrides.

    Args:
        yaml_path: Optional YAML config path. Falls back to `PHONEDIAL_CONFIG`.
        env_path: Optional .env path (default: `.env` if present).
    """

    data: dict[str, Any] = {}

    if env_path is None:
        maybe = Path(".env")
        env_path = maybe if maybe.exists() else None

    dotenv = _read_dotenv(env_path) if env_path is not None and env_path.exists() else {}

    if yaml_path is None:
        cfg = os.environ.get("PHONEDIAL_CONFIG") or dotenv.get("PHONEDIAL_CONFIG")
        if cfg:
            yaml_path = Path(cfg)

    if yaml_path is not None and yaml_path.exists():
        data.update(_read_yaml(yaml_path))

    if dotenv:
        _overlay_env(data, dotenv)

    os_env: dict[str, str] = {k: v for k, v in os.environ.items() if k in _ENV_MAP}
    _overlay_env(data, os_env)

    return PhonedialSettings.model_validate(data)
