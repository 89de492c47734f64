"""Connection over the adapter process's own stdin/stdout.

IDE frontends spawn the debug adapter as a child process and talk DAP over
its standard streams, so this is the default transport.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import IO
from typing import Any

from logpoints.connections.base import ConnectionBase

logger = logging.getLogger(__name__)


class StdioConnection(ConnectionBase):
    """DAP over stdin/stdout.

    Nothing else may write to stdout while this connection is open; logging
    goes to stderr or a file.
    """

    def __init__(self, stdin: IO[Any] | None = None, stdout: IO[Any] | None = None) -> None:
        super().__init__()
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._read_transport: asyncio.ReadTransport | None = None

    async def accept(self) -> None:
        """Wrap the standard streams in asyncio stream objects."""
        loop = asyncio.get_running_loop()

        reader = asyncio.StreamReader()
        self._read_transport, _ = await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), self._stdin
        )

        write_transport, write_protocol = await loop.connect_write_pipe(
            asyncio.streams.FlowControlMixin, self._stdout
        )
        self.reader = reader
        self.writer = asyncio.StreamWriter(write_transport, write_protocol, reader, loop)
        self._is_connected = True
        logger.info("Serving DAP over stdio")

    async def close(self) -> None:
        if self.writer:
            self.writer.close()
        if self._read_transport is not None:
            self._read_transport.close()
            self._read_transport = None

        self._is_connected = False
        logger.info("Stdio connection closed")
