"""
Shared logger utility for the retail pricing package.
Provides a consistent logger configuration for all modules.
"""
import logging
import os


LOG_LEVEL_ENV = "RETAIL_PRICING_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def get_log_level() -> str:
    """Log level name from the environment, falling back to INFO."""
    level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper()
    # getLevelName returns "Level X" for unknown names
    if not isinstance(logging.getLevelName(level), int):
        return DEFAULT_LOG_LEVEL
    return level


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Returns a logger with the specified name, configured with a standard format
    and the level from RETAIL_PRICING_LOG_LEVEL (INFO by default).
    If no name is provided, returns the root logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(get_log_level())
    return logger
