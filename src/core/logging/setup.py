"""Logging setup and configuration."""

import logging
import sys
import uuid

from core.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_LOG_LEVEL = logging.INFO

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.identity",
    "azure.identity.aio",
    "azure.keyvault",
    "aioodbc",
    "uvicorn.access",
]


def setup_logging(
    name: str = "historical_db",
    level: int | str = DEFAULT_LOG_LEVEL,
    json_format: bool = False,
    suppress_noisy: bool = True,
) -> logging.Logger:
    """
    Configure root logging with a single stdout handler.

    Args:
        name: Logger name to return
        level: Root log level (int or name such as "DEBUG")
        json_format: Emit one JSON object per line instead of console text
        suppress_noisy: Quiet down Azure SDK and driver loggers

    Returns:
        Logger for ``name``
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = DEFAULT_LOG_LEVEL

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug("Logging initialized", extra={"operation": "setup_logging"})
    return logger


def generate_request_id() -> str:
    """Short random identifier for correlating one request's log lines."""
    return uuid.uuid4().hex[:12]
