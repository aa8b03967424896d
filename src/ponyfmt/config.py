import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_INDENT_WIDTH = 2
DEFAULT_LOG_LEVEL = "WARNING"


def _positive_int_from_env(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return None
    if value < 1:
        logger.warning("Ignoring %s=%r: must be at least 1", name, raw)
        return None
    return value


def get_indent_width() -> int:
    return _positive_int_from_env("PONYFMT_INDENT") or DEFAULT_INDENT_WIDTH


def get_worker_count() -> int | None:
    """Thread pool size; ``None`` lets the executor choose."""
    return _positive_int_from_env("PONYFMT_WORKERS")


def get_log_level() -> str:
    level = os.getenv("PONYFMT_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if level not in logging.getLevelNamesMapping():
        logger.warning("Ignoring PONYFMT_LOG_LEVEL=%r: unknown level", level)
        return DEFAULT_LOG_LEVEL
    return level
