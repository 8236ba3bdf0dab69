"""Logging setup for the swe-llm CLI and embedding applications.

Library code only creates module loggers; nothing is configured on import.
"""

import logging
import sys
from typing import Literal

from swe_llm.settings import get_settings

LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"

# HTTP and provider SDK loggers that log every request at INFO/DEBUG
LIBRARY_LOGGERS = (
    "httpx",
    "httpcore",
    "openai",
    "anthropic",
    "langchain_core",
    "langchain_openai",
    "langchain_anthropic",
    "langchain_google_genai",
)


def quiet_library_loggers(level: int = logging.WARNING) -> None:
    """Raise provider/HTTP library loggers to ``level`` and drop their own handlers."""
    for name in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(level)
        library_logger.handlers.clear()


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
) -> None:
    """Send swe_llm logs to stderr at ``level`` (default: ``settings.log_level``)."""
    log_level = getattr(logging, level or get_settings().log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    logging.getLogger("swe_llm").setLevel(log_level)
    quiet_library_loggers()
