"""Tests for log_exception."""

import logging
from unittest.mock import MagicMock

from core.errors.exceptions import ConfigurationError
from core.logging.utilities import log_exception


class TestLogException:

    def test_adds_category_and_error_fields(self):
        logger = MagicMock()
        exc = ConfigurationError("incomplete")

        log_exception(logger, exc, "Startup failed")

        logger.log.assert_called_once_with(
            logging.ERROR,
            "Startup failed",
            exc_info=exc,
            extra={
                "error_category": "permanent",
                "error_type": "ConfigurationError",
                "error_message": "incomplete",
            },
        )

    def test_unclassified_exception_is_unknown(self):
        logger = MagicMock()

        log_exception(logger, ValueError("x"), "oops")

        extra = logger.log.call_args.kwargs["extra"]
        assert extra["error_category"] == "unknown"
        assert extra["error_type"] == "ValueError"

    def test_expired_driver_token_is_transient(self):
        logger = MagicMock()

        log_exception(logger, RuntimeError("Login failed: token has expired"), "Query failed")

        assert logger.log.call_args.kwargs["extra"]["error_category"] == "transient"

    def test_explicit_category_wins(self):
        logger = MagicMock()

        log_exception(logger, ValueError("x"), "oops", error_category="auth")

        assert logger.log.call_args.kwargs["extra"]["error_category"] == "auth"

    def test_without_traceback(self):
        logger = MagicMock()

        log_exception(logger, ValueError("x"), "oops", level=logging.WARNING, include_traceback=False)

        args, kwargs = logger.log.call_args
        assert args == (logging.WARNING, "oops")
        assert kwargs["exc_info"] is None

    def test_extra_fields_pass_through(self):
        logger = MagicMock()

        log_exception(logger, ValueError("x"), "oops", http_method="GET", http_path="/api/customers")

        extra = logger.log.call_args.kwargs["extra"]
        assert extra["http_method"] == "GET"
        assert extra["http_path"] == "/api/customers"

    def test_truncates_long_messages(self):
        logger = MagicMock()

        log_exception(logger, RuntimeError("x" * 600), "oops")

        assert logger.log.call_args.kwargs["extra"]["error_message"] == "x" * 500 + "..."
