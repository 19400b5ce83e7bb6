"""
Runtime configuration.

Controls diagnostic tracing of the coroutine adapter and the logging setup
used by scripts and examples.
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, field_validator

DEFAULT_LOG_FORMAT = '[lazycoro] %(levelname)s %(name)s: %(message)s'

_TRUTHY = {"1", "true", "yes", "on"}
_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


class LazyConfig(BaseModel):
    """
    Settings for lazy futures and coroutines.

    Examples:
        config = LazyConfig(trace=True)
        configure_logging(config)
    """

    trace: bool = False
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT

    @field_validator("log_level")
    @classmethod
    def check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls) -> 'LazyConfig':
        """
        Build a config from environment variables.

        Reads LAZYCORO_TRACE and LAZYCORO_LOG_LEVEL.
        """
        trace = os.getenv("LAZYCORO_TRACE", "").strip().lower() in _TRUTHY
        level = os.getenv("LAZYCORO_LOG_LEVEL", "INFO")
        return cls(trace=trace, log_level=level)


_config: Optional[LazyConfig] = None


def get_config() -> LazyConfig:
    """Return the process default config, reading the environment on first use."""
    global _config
    if _config is None:
        _config = LazyConfig.from_env()
    return _config


def set_config(config: Optional[LazyConfig]) -> None:
    """Replace the process default config (None re-reads the environment)."""
    global _config
    _config = config


def configure_logging(config: Optional[LazyConfig] = None) -> None:
    """
    Configure root logging for scripts.

    Library modules only create loggers; call this from entry points.
    Tracing forces DEBUG so the coroutine trace lines are visible.
    """
    config = config or get_config()
    level = logging.DEBUG if config.trace else getattr(logging, config.log_level)
    logging.basicConfig(level=level, format=config.log_format)
