"""TCPServerConnection implementation for DAP protocol over TCP."""

from __future__ import annotations

import asyncio
import logging
import socket

from logpoints.connections.base import ConnectionBase

logger = logging.getLogger(__name__)


class TCPServerConnection(ConnectionBase):
    """TCP server connection for DAP protocol.

    Listens for a single DAP client.  The bound port is known as soon as
    ``start_listening`` returns, which lets tests use an ephemeral port.
    """

    def __init__(self, host: str | None = None, port: int | None = None) -> None:
        """Initialize the TCP server connection.

        Args:
            host: The host address to bind to. Defaults to localhost.
            port: The port to bind to. Use 0 for an ephemeral port.
        """
        super().__init__()
        self.host = host or "localhost"
        self.port = 4711 if port is None else port
        self.server: asyncio.Server | None = None
        self._client_connected: asyncio.Future[bool] | None = None

    async def accept(self) -> None:
        """Start listening and wait for the first client to connect.

        If start_listening() was already called, this method reuses the
        existing server socket and only waits for a client.
        """
        if self.server is None:
            await self.start_listening()

        await self.wait_for_client()

    async def start_listening(self) -> None:
        """Start the TCP server listening without waiting for a client."""
        if self.server is not None:
            logger.warning("Server already listening on %s:%s", self.host, self.port)
            return

        logger.info("Starting TCP server on %s:%s", self.host, self.port)
        self.server = await asyncio.start_server(
            self._handle_client, self.host, self.port, reuse_address=True
        )
        self._client_connected = asyncio.get_running_loop().create_future()
        self._update_bound_port()

    def _update_bound_port(self) -> None:
        """Update the bound port from the server socket (for port=0)."""
        if self.server is None or not self.server.sockets:
            return

        try:
            sock = self.server.sockets[0]
            if sock.family in (socket.AF_INET, socket.AF_INET6):
                _, port = sock.getsockname()[:2]
                if port != self.port:
                    logger.debug(
                        "Server bound to ephemeral port %d (requested: %d)", port, self.port
                    )
                    self.port = port
        except (IndexError, OSError) as e:
            logger.debug("Could not determine bound port: %s", e)

    async def wait_for_client(self, timeout: float | None = None) -> None:
        """Wait until a client connects (after start_listening).

        Args:
            timeout: Optional timeout in seconds to wait for a client connection.

        Raises:
            RuntimeError: If called before start_listening
            asyncio.TimeoutError: If timeout is reached before a client connects
        """
        if self._client_connected is None:
            if self.is_connected:
                return
            raise RuntimeError("wait_for_client called before start_listening")

        try:
            await asyncio.wait_for(asyncio.shield(self._client_connected), timeout=timeout)
            logger.info("Client connected to TCP server on %s:%s", self.host, self.port)
            self._is_connected = True
        except asyncio.TimeoutError:
            logger.warning(
                "Timed out waiting for client connection on %s:%s", self.host, self.port
            )
            raise

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Handle a new client connection."""
        if self.writer is not None:
            logger.warning("Rejecting additional TCP client; one session per adapter")
            writer.close()
            return

        logger.debug("TCP client connected")
        self.reader = reader
        self.writer = writer
        self._is_connected = True

        # Signal that client is connected
        if self._client_connected and not self._client_connected.done():
            self._client_connected.set_result(True)
        self._client_connected = None

    async def close(self) -> None:
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except ConnectionError:
                logger.debug("Client connection already reset")

        if self.server:
            self.server.close()
            await self.server.wait_closed()

        self._is_connected = False
        logger.info("TCP connection closed")
