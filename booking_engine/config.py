"""
Centralized configuration with environment variable overrides.

Scoring weights, oracle timeouts and scheduling defaults live here.
Nothing is hardcoded in strategy or scorer logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from booking_engine.logging_context import AttemptIdFilter

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
class OracleConfig:
    """External calendar lookup settings."""

    timeout_seconds: float = _safe_float("ORACLE_TIMEOUT_SECONDS", "5.0")
    calendar_id: str = os.getenv("GOOGLE_CALENDAR_ID", "primary")


@dataclass(frozen=True)
class ScoringConfig:
    """Weights used by the smart strategy and the match scorer."""

    base_score: int = _safe_int("SMART_BASE_SCORE", "100")
    workload_penalty: int = _safe_int("WORKLOAD_PENALTY", "5")
    recent_window_days: int = _safe_int("RECENT_BOOKING_WINDOW_DAYS", "7")
    skill_points: int = _safe_int("SKILL_MATCH_POINTS", "50")
    language_points: int = _safe_int("LANGUAGE_MATCH_POINTS", "40")
    keyword_points: int = _safe_int("KEYWORD_MATCH_POINTS", "10")
    legacy_topic_points: int = _safe_int("LEGACY_TOPIC_POINTS", "50")
    legacy_language_points: int = _safe_int("LEGACY_LANGUAGE_POINTS", "30")
    legacy_english_points: int = _safe_int("LEGACY_ENGLISH_POINTS", "10")


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot generation defaults."""

    slot_interval_minutes: int = _safe_int("SLOT_INTERVAL_MINUTES", "30")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    oracle: OracleConfig = field(default_factory=OracleConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    engine_name: str = os.getenv("ENGINE_NAME", "booking-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.oracle.timeout_seconds <= 0:
        raise ValueError(
            f"ORACLE_TIMEOUT_SECONDS must be > 0, got {config.oracle.timeout_seconds}"
        )
    if not config.oracle.calendar_id.strip():
        raise ValueError("GOOGLE_CALENDAR_ID must not be empty")
    if config.scoring.workload_penalty < 0:
        raise ValueError(
            f"WORKLOAD_PENALTY must be >= 0, got {config.scoring.workload_penalty}"
        )
    if config.scoring.recent_window_days < 1:
        raise ValueError(
            "RECENT_BOOKING_WINDOW_DAYS must be >= 1, "
            f"got {config.scoring.recent_window_days}"
        )

    for points_name, points_value in [
        ("SKILL_MATCH_POINTS", config.scoring.skill_points),
        ("LANGUAGE_MATCH_POINTS", config.scoring.language_points),
        ("KEYWORD_MATCH_POINTS", config.scoring.keyword_points),
        ("LEGACY_TOPIC_POINTS", config.scoring.legacy_topic_points),
        ("LEGACY_LANGUAGE_POINTS", config.scoring.legacy_language_points),
        ("LEGACY_ENGLISH_POINTS", config.scoring.legacy_english_points),
    ]:
        if points_value < 0:
            raise ValueError(f"{points_name} must be >= 0, got {points_value}")

    if config.scheduling.slot_interval_minutes < 1:
        raise ValueError(
            "SLOT_INTERVAL_MINUTES must be >= 1, "
            f"got {config.scheduling.slot_interval_minutes}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    handler = logging.StreamHandler()
    handler.addFilter(AttemptIdFilter())
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(attempt_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
    )
    logger.info("Configuration loaded for '%s'", config.engine_name)
    return config


# Singleton instance
settings = load_config()
