"""Standardized error handling patterns for the log points debug adapter.

This module provides the decorator that turns adapter errors raised by request
handlers into a fallback value (normally a failing DAP reply) with consistent
logging.
"""

from __future__ import annotations

from functools import wraps
import logging
from typing import TYPE_CHECKING
from typing import Any

from logpoints.errors.logpoints_errors import ConfigurationError
from logpoints.errors.logpoints_errors import LogpointsError
from logpoints.errors.logpoints_errors import ProtocolError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


def _handle_adapter_exception(e: LogpointsError, *, operation: str) -> None:
    """Log adapter exceptions consistently."""
    if isinstance(e, ConfigurationError):
        logger.warning("Configuration error in %s: %s", operation, e)
        return

    if isinstance(e, ProtocolError):
        logger.warning("Protocol error in %s: %s", operation, e)
        return

    logger.error("Error in %s: %s", operation, e, exc_info=True)


def handle_adapter_errors(
    operation: str | None = None,
    *,
    fallback: Callable[..., Any] | None = None,
    reraise: bool = False,
) -> Callable:
    """Decorator for adapter-level error handling.

    Adapter errors (``LogpointsError`` subclasses) raised by the wrapped
    function are logged and, unless ``reraise`` is set, replaced by
    ``fallback(error, *args, **kwargs)``.  Any other exception propagates
    unchanged so that the server can report it.

    Args:
        operation: Name of the adapter operation being performed
        fallback: Builds the value returned in place of the failed call
        reraise: Whether to re-raise the error after logging

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except LogpointsError as e:
                _handle_adapter_exception(e, operation=operation or func.__name__)
                if reraise or fallback is None:
                    raise
                return fallback(e, *args, **kwargs)

        return wrapper

    return decorator
