"""
Centralized configuration with environment variable overrides.

Endpoint locations, estimation constants, and placeholder text are
configurable here so that engine and client code never hardcode them.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class ApiConfig:
    """Dashboard HTTP endpoints used for approvals and messaging."""

    base_url: str = os.getenv("SMART_STATUS_API_URL", "http://localhost:3000")
    access_token: str = os.getenv("SMART_STATUS_API_TOKEN", "")
    timeout_sec: float = _safe_float("SMART_STATUS_API_TIMEOUT", "10.0")


@dataclass(frozen=True)
class EngineConfig:
    """Status derivation settings."""

    days_per_milestone: int = _safe_int("ENGINE_DAYS_PER_MILESTONE", "7")
    milestone_title_placeholder: str = os.getenv(
        "MILESTONE_TITLE_PLACEHOLDER", "Untitled milestone"
    )
    feedback_subject: str = os.getenv("FEEDBACK_SUBJECT", "Booking Feedback")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    api: ApiConfig = field(default_factory=ApiConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"SMART_STATUS_API_URL must be an http(s) URL, got {config.api.base_url!r}"
        )
    if config.api.timeout_sec <= 0:
        raise ValueError(
            f"SMART_STATUS_API_TIMEOUT must be > 0, got {config.api.timeout_sec}"
        )
    if config.engine.days_per_milestone < 1:
        raise ValueError(
            f"ENGINE_DAYS_PER_MILESTONE must be >= 1, got {config.engine.days_per_milestone}"
        )
    if not config.engine.milestone_title_placeholder.strip():
        raise ValueError("MILESTONE_TITLE_PLACEHOLDER must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded (api=%s)", config.api.base_url)
    return config


# Singleton instance
settings = load_config()
