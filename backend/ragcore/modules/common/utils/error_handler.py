"""Helpers for orchestrators deciding what to do with a pipeline failure."""

from typing import Any, Dict

from ..constants import RETRY_POLICY
from ..exceptions import DomainError


def is_retryable(error: BaseException) -> bool:
    """Return True if the step that raised ``error`` may be retried.

    Errors outside the domain hierarchy are treated as not retryable.
    """
    if not isinstance(error, DomainError):
        return False

    for exception_class in type(error).__mro__:
        if exception_class in RETRY_POLICY:
            return RETRY_POLICY[exception_class]

    return False


def describe_error(error: BaseException) -> Dict[str, Any]:
    """Summarize an error for a status record or a structured log line.

    Args:
        error: The exception raised by a pipeline step

    Returns:
        Dictionary with the error type, message and retryability
    """
    return {
        "error_type": type(error).__name__,
        "message": str(error),
        "retryable": is_retryable(error),
    }
