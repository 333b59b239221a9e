import logging
import sys
import os
from typing import Dict, Optional

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

_LEVEL_COLORS: Dict[str, str] = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[1;31m",
    "CRITICAL": "\033[1;35m",
}
_RESET = "\033[0m"

# Loggers owned by libraries; they forward to the root handler
_ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _colors_enabled(stream) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    return hasattr(stream, "isatty") and stream.isatty() and os.environ.get("TERM") != "dumb"


class LevelColorFormatter(logging.Formatter):
    """Colors the level name; plain output when the stream is not a terminal"""

    def __init__(self, fmt: str, use_colors: bool):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        original = record.levelname
        color = _LEVEL_COLORS.get(original)
        if color:
            record.levelname = f"{color}{original}{_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    log_level: Optional[str] = None,
    format_string: Optional[str] = None,
    force_configure: bool = False,
    use_colors: bool = True,
) -> None:
    """
    Configure the root logger with one stdout handler.

    Existing handlers are left alone unless ``force_configure`` is set.
    SQL echo stays off below DEBUG.
    """
    level_name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if root.handlers and not force_configure:
        return

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        LevelColorFormatter(format_string or DEFAULT_FORMAT, use_colors and _colors_enabled(sys.stdout))
    )
    root.addHandler(handler)
    root.setLevel(level)

    for name in _ROUTED_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers = []
        library_logger.propagate = True

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if level <= logging.DEBUG else logging.WARNING)
    root.debug(f"Logging configured at {level_name}")


def get_logger(name: str) -> logging.Logger:
    """Module logger that only propagates to the root handler."""
    logger = logging.getLogger(name)
    logger.handlers = []
    logger.propagate = True
    return logger
