"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_request_id: ContextVar[str] = ContextVar("request_id", default="")
_operation: ContextVar[str] = ContextVar("operation", default="")


def set_log_context(
    request_id: Optional[str] = None,
    operation: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if operation is not None:
        _operation.set(operation)


def get_log_context() -> Dict[str, str]:
    return {
        "request_id": _request_id.get(),
        "operation": _operation.get(),
    }


def clear_log_context() -> None:
    _request_id.set("")
    _operation.set("")
