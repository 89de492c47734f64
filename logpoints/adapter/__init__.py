"""Adapter components for the log points debug adapter."""

from logpoints.adapter.request_handlers import complete_remote_call
from logpoints.adapter.request_handlers import handle_request
from logpoints.adapter.server import DebugAdapterServer
from logpoints.adapter.session import AdapterPhase
from logpoints.adapter.session import SessionIdentity
from logpoints.adapter.session import SessionState

__all__ = [
    "AdapterPhase",
    "DebugAdapterServer",
    "SessionIdentity",
    "SessionState",
    "complete_remote_call",
    "handle_request",
]
