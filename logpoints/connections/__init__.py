"""logpoints.connections package

Expose ConnectionBase and a connection factory at package level; the
connection implementations live in submodules.
"""

from __future__ import annotations

import logging

from logpoints.connections.base import ConnectionBase
from logpoints.connections.stdio import StdioConnection
from logpoints.connections.tcp import TCPServerConnection

logger = logging.getLogger(__name__)

__all__ = ["ConnectionBase", "StdioConnection", "TCPServerConnection", "create_connection"]


def create_connection(
    connection_type: str,
    host: str = "localhost",
    port: int | None = None,
) -> ConnectionBase | None:
    """Factory function to create a connection based on type.

    Args:
        connection_type: Either "stdio" or "tcp"
        host: Host to bind to (for TCP connections)
        port: Port number (for TCP connections)

    Returns:
        A ConnectionBase instance or None if the connection type is unknown.
    """
    if connection_type == "stdio":
        return StdioConnection()
    if connection_type == "tcp":
        return TCPServerConnection(host=host, port=port)
    logger.error("Unknown connection type: %s", connection_type)
    return None
