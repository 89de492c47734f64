"""
Debug Adapter Protocol message validation and construction.

This module provides the classes used to validate incoming Debug Adapter
Protocol (DAP) messages and to build outgoing responses and events with
correct sequence numbers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from logpoints.errors import ProtocolError

if TYPE_CHECKING:
    from logpoints.protocol.messages import ErrorResponse
    from logpoints.protocol.messages import GenericEvent
    from logpoints.protocol.messages import GenericRequest
    from logpoints.protocol.messages import GenericResponse
    from logpoints.protocol.messages import ProtocolMessage

logger = logging.getLogger(__name__)


class ProtocolFactory:
    """
    Builds Debug Adapter Protocol messages.

    This class owns the sequencing for created messages and provides helpers
    for constructing responses (including error responses) and events.
    """

    def __init__(self, *, seq_start: int = 1) -> None:
        self.seq_counter = seq_start

    # ---- Core constructors -------------------------------------------------

    def next_seq(self) -> int:
        seq = self.seq_counter
        self.seq_counter += 1
        return seq

    def create_response(
        self,
        request: GenericRequest,
        success: bool,
        body: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> GenericResponse:
        # request is a TypedDict; access via plain dict for safety
        req = cast("dict[str, Any]", request)

        response_dict: dict[str, Any] = {
            "seq": self.next_seq(),
            "type": "response",
            "request_seq": req["seq"],
            "success": success,
            "command": req.get("command"),
        }

        if body is not None:
            response_dict["body"] = body

        if not success and error_message is not None:
            response_dict["message"] = error_message

        return cast("GenericResponse", response_dict)

    def create_error_response(self, request: GenericRequest, error_message: str) -> ErrorResponse:
        error_body = {
            "error": "ProtocolError",
            "details": {
                "command": request.get("command"),
            },
        }
        response = self.create_response(request, False, error_body, error_message)
        return cast("ErrorResponse", response)

    def create_event(self, event_type: str, body: dict[str, Any] | None = None) -> GenericEvent:
        event_dict: dict[str, Any] = {
            "seq": self.next_seq(),
            "type": "event",
            "event": event_type,
        }

        if body is not None:
            event_dict["body"] = body

        return cast("GenericEvent", event_dict)


class ProtocolHandler:
    """
    Handles validation and construction of Debug Adapter Protocol messages.
    """

    def __init__(self):
        self._factory = ProtocolFactory(seq_start=1)

    def validate_message(self, message: Any) -> ProtocolMessage:
        """
        Check that a decoded message has the shape of a DAP message.

        Args:
            message: The decoded JSON value

        Returns:
            The message, typed as a request, response or event

        Raises:
            ProtocolError: If the message is not a valid protocol message
        """
        if not isinstance(message, dict):
            raise ProtocolError("Message is not a JSON object")

        if "seq" not in message:
            raise ProtocolError("Message missing 'seq' field")

        if "type" not in message:
            raise ProtocolError("Message missing 'type' field")

        msg_type = message["type"]

        if msg_type == "request":
            if "command" not in message:
                raise ProtocolError("Request message missing 'command' field")
            return cast("GenericRequest", message)

        if msg_type == "response":
            for key in ("request_seq", "success", "command"):
                if key not in message:
                    msg = f"Response message missing '{key}' field"
                    raise ProtocolError(msg)
            return cast("GenericResponse", message)

        if msg_type == "event":
            if "event" not in message:
                raise ProtocolError("Event message missing 'event' field")
            return cast("GenericEvent", message)

        raise ProtocolError(f"Invalid message type: {msg_type}")

    def create_response(
        self,
        request: GenericRequest,
        success: bool,
        body: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> GenericResponse:
        return self._factory.create_response(request, success, body, error_message)

    def create_error_response(self, request: GenericRequest, error_message: str) -> ErrorResponse:
        return self._factory.create_error_response(request, error_message)

    def create_event(self, event_type: str, body: dict[str, Any] | None = None) -> GenericEvent:
        return self._factory.create_event(event_type, body)
