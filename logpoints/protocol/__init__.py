"""Debug Adapter Protocol messages and helpers."""

from logpoints.protocol.protocol import ProtocolFactory
from logpoints.protocol.protocol import ProtocolHandler

__all__ = ["ProtocolFactory", "ProtocolHandler"]
