"""Error handling for the log points debug adapter."""

from logpoints.errors.error_patterns import handle_adapter_errors
from logpoints.errors.logpoints_errors import ConfigurationError
from logpoints.errors.logpoints_errors import LogpointsError
from logpoints.errors.logpoints_errors import ProtocolError
from logpoints.errors.logpoints_errors import RemoteCallError
from logpoints.errors.logpoints_errors import create_dap_response

__all__ = [
    "ConfigurationError",
    "LogpointsError",
    "ProtocolError",
    "RemoteCallError",
    "create_dap_response",
    "handle_adapter_errors",
]
