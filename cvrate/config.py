"""
Engine settings read from the environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class EngineSettings:
    """
    Settings of the rate engine.

    Attributes:
        cache_enabled: Put a read-through cache in front of the rate timeline
        cache_max_size: Maximum cached lookups
        default_scale: Interest amount scale used when callers pass none
        log_level: Level applied by :func:`configure_logging`
    """

    cache_enabled: bool = True
    cache_max_size: int = 10000
    default_scale: int = 0
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """
        Read settings from CVRATE_* environment variables.

        Unset or blank variables keep their defaults.
        """
        settings = cls(
            cache_enabled=_env_bool("CVRATE_CACHE_ENABLED", cls.cache_enabled),
            cache_max_size=_env_int("CVRATE_CACHE_MAX_SIZE", cls.cache_max_size),
            default_scale=_env_int("CVRATE_DEFAULT_SCALE", cls.default_scale),
            log_level=os.getenv("CVRATE_LOG_LEVEL", cls.log_level).upper(),
        )
        if settings.cache_max_size <= 0:
            raise ValueError("CVRATE_CACHE_MAX_SIZE must be positive")
        if settings.default_scale < 0:
            raise ValueError("CVRATE_DEFAULT_SCALE must not be negative")
        return settings


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic stderr handler for scripts; the library never calls this itself."""
    level = level or EngineSettings.from_env().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
