"""Base class for all connection types.

Every transport carries DAP messages framed with a ``Content-Length`` header;
the framing lives here so that connections only have to provide a
reader/writer pair.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class ConnectionBase(ABC):
    """Base class for all connection types."""

    def __init__(self) -> None:
        self.reader: Any = None
        self.writer: Any = None
        self._is_connected = False

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    @abstractmethod
    async def accept(self) -> None:
        """Accept a client connection."""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""

    async def read_message(self) -> Any | None:
        """Read one DAP message with Content-Length headers.

        Returns the decoded JSON value, or None on EOF.

        Raises:
            RuntimeError: If there is no active connection or the headers
                are malformed
            json.JSONDecodeError: If the content is not valid JSON
        """
        if not self.reader:
            msg = "No active connection"
            raise RuntimeError(msg)

        headers: dict[str, str] = {}

        # Read headers
        while True:
            line = await self.reader.readline()
            if not line:
                return None  # Connection closed

            line = line.decode("utf-8").strip()
            if not line:
                break

            key, sep, value = line.partition(":")
            if not sep:
                msg = f"Malformed header line: {line!r}"
                raise RuntimeError(msg)
            headers[key.strip()] = value.strip()

        if "Content-Length" not in headers:
            msg = "Content-Length header missing"
            raise RuntimeError(msg)

        content_length = int(headers["Content-Length"])
        content = await self.reader.readexactly(content_length)
        if not content:
            return None

        message = json.loads(content.decode("utf-8"))
        logger.debug("Received message: %s", message)
        return message

    async def write_message(self, message: dict[str, Any]) -> None:
        """Write a DAP message with a Content-Length header."""
        if not self.writer:
            msg = "No active connection"
            raise RuntimeError(msg)

        content = json.dumps(message).encode("utf-8")
        header = f"Content-Length: {len(content)}\r\n\r\n".encode()

        self.writer.write(header + content)
        await self.writer.drain()
        logger.debug("Sent message: %s", message)
