"""
Configuration - Client defaults, validated config models, and loading.

Merges an optional YAML file with environment variables. Environment
variables take precedence over YAML values; explicit overrides take
precedence over both. Every value is validated through pydantic before a
client is built from it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from voe.api.exceptions import ERROR_MESSAGES
from voe.api.validation import UrlStr, validate
from voe.core.logger import get_logger

logger = get_logger("voe.config")


VOE_API_BASE_URL = "https://voe.sx/api"

DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds

# Sliding window: at most MAX_REQUESTS inside any trailing TIME_WINDOW,
# aiming for REQUESTS_PER_SECOND sustained.
RATE_LIMIT_REQUESTS_PER_SECOND = 3
RATE_LIMIT_MAX_REQUESTS = 4
RATE_LIMIT_TIME_WINDOW = 1.0  # seconds


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------

_ENV_MAPPINGS = {
    "VOE_API_KEY": ("api_key", str),
    "VOE_BASE_URL": ("base_url", lambda v: v.strip().rstrip("/")),
    "VOE_TIMEOUT": ("timeout", float),
    "VOE_RETRY_ATTEMPTS": ("retry_attempts", int),
    "VOE_RETRY_DELAY": ("retry_delay", float),
    "VOE_RATE_LIMIT_MAX_REQUESTS": (("rate_limit", "max_requests"), int),
    "VOE_RATE_LIMIT_TIME_WINDOW": (("rate_limit", "time_window"), float),
    "VOE_RATE_LIMIT_RPS": (("rate_limit", "requests_per_second"), int),
}


def _apply_env_overrides(config: Dict[str, Any]) -> None:
    """Override YAML values with environment variables where set."""
    for env_key, (path, converter) in _ENV_MAPPINGS.items():
        value = os.getenv(env_key)
        if value is None:
            continue
        try:
            converted = converter(value)
        except (ValueError, TypeError) as e:
            logger.warning(
                "Env override failed to convert, keeping file value",
                env_key=env_key,
                error=str(e),
            )
            continue
        if isinstance(path, tuple):
            section = config.setdefault(path[0], {})
            if not isinstance(section, dict):
                section = {}
                config[path[0]] = section
            section[path[1]] = converted
        else:
            config[path] = converted


# ---------------------------------------------------------------------------
# Pydantic Configuration Models
# ---------------------------------------------------------------------------

class RateLimitConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    requests_per_second: int = Field(default=RATE_LIMIT_REQUESTS_PER_SECOND, gt=0)
    max_requests: int = Field(default=RATE_LIMIT_MAX_REQUESTS, gt=0)
    time_window: float = Field(default=RATE_LIMIT_TIME_WINDOW, gt=0)


class ClientConfig(BaseModel):
    """Validated, immutable client configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: str
    base_url: UrlStr = VOE_API_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    retry_attempts: int = Field(default=DEFAULT_RETRY_ATTEMPTS, gt=0)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, gt=0)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v):
        if not v or not v.strip():
            raise ValueError(ERROR_MESSAGES["MISSING_API_KEY"])
        return v


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_client_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ClientConfig:
    """Load a client config (YAML ``voe:`` section + .env + env + overrides).

    Raises a VALIDATION ``VoeError`` when the merged values are invalid.
    """
    load_dotenv()

    file_config: Dict[str, Any] = {}
    if config_path:
        config_file = Path(config_path)
        if config_file.exists():
            with open(config_file, "r") as f:
                doc = yaml.safe_load(f) or {}
            section = doc.get("voe", doc) if isinstance(doc, dict) else {}
            file_config = dict(section or {})
        else:
            logger.warning("Config file not found, using env only", path=str(config_file))

    _apply_env_overrides(file_config)

    def _deep_update(dst: Dict[str, Any], src: Dict[str, Any]) -> None:
        for key, value in (src or {}).items():
            if isinstance(value, dict) and isinstance(dst.get(key), dict):
                _deep_update(dst[key], value)
            elif value is not None:
                dst[key] = value

    if overrides:
        _deep_update(file_config, overrides)

    return validate(ClientConfig, file_config)
