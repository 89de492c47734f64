"""Centralized error handling for the log points debug adapter.

This module provides a hierarchy of exceptions for the errors the adapter can
raise while serving a DAP session, along with utilities for turning them into
DAP error responses.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class LogpointsError(Exception):
    """Base exception for all adapter errors.

    All adapter-specific exceptions should inherit from this class to enable
    centralized error handling and reporting.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause!s})"
        return self.message


class ConfigurationError(LogpointsError):
    """Raised when adapter settings or attach arguments are unusable."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, error_code="ConfigurationError", details=details, **kwargs)
        self.config_key = config_key


class ProtocolError(LogpointsError):
    """Raised when there's a DAP protocol error."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        sequence: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if command:
            details["command"] = command
        if sequence is not None:
            details["sequence"] = sequence
        super().__init__(message, error_code="ProtocolError", details=details, **kwargs)
        self.command = command
        self.sequence = sequence


class RemoteCallError(LogpointsError):
    """Raised when a call to the remote debugging service cannot be made."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        site_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        if site_name:
            details["site_name"] = site_name
        super().__init__(message, error_code="RemoteCallError", details=details, **kwargs)
        self.operation = operation
        self.site_name = site_name


def create_dap_response(
    error: Exception,
    request_seq: int,
    command: str,
) -> dict[str, Any]:
    """Create a failing DAP response for the given error.

    Args:
        error: The exception that occurred
        request_seq: The sequence number of the request
        command: The command that failed

    Returns:
        DAP response dictionary with error information. ``seq`` is assigned
        when the message is sent.
    """
    if isinstance(error, LogpointsError):
        error_info = error.to_dict()
    else:
        error_info = {
            "error": error.__class__.__name__,
            "message": str(error),
            "details": {},
        }

    return {
        "type": "response",
        "request_seq": request_seq,
        "success": False,
        "command": command,
        "message": error_info.get("message", "Unknown error"),
        "body": {
            "error": error_info.get("error"),
            "details": error_info.get("details", {}),
        },
    }
