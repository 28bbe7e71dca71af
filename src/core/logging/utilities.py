"""Helpers for logging failures with their error category."""

import logging
from typing import Any

from core.errors.exceptions import classify_exception

MAX_ERROR_MESSAGE_LENGTH = 500


def log_exception(
    logger: logging.Logger,
    exc: Exception,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **fields: Any,
) -> None:
    """
    Log a failure with error_category, error_type and a bounded error_message.

    The category comes from classify_exception, so an expired driver token
    shows up as "transient" and an unclassified failure as "unknown".

    Example:
        try:
            await gateway.query(statement, params)
        except Exception as e:
            log_exception(logger, e, "Customer search failed", http_path="/api/customers")
    """
    fields.setdefault("error_category", classify_exception(exc).value)
    fields["error_type"] = type(exc).__name__

    error_msg = str(exc)
    if len(error_msg) > MAX_ERROR_MESSAGE_LENGTH:
        error_msg = error_msg[:MAX_ERROR_MESSAGE_LENGTH] + "..."
    fields["error_message"] = error_msg

    logger.log(level, msg, exc_info=exc if include_traceback else None, extra=fields)
