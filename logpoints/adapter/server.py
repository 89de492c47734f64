"""Debug Adapter Protocol server core implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from logpoints.adapter.request_handlers import complete_remote_call
from logpoints.adapter.request_handlers import handle_request
from logpoints.adapter.session import SessionState
from logpoints.adapter.types import RemoteOperation
from logpoints.errors import ProtocolError
from logpoints.protocol.protocol import ProtocolHandler
from logpoints.remote.results import Failure

if TYPE_CHECKING:
    from collections.abc import Iterable

    from logpoints.adapter.types import DAPRequest
    from logpoints.adapter.types import Emit
    from logpoints.adapter.types import HandlerOutcome
    from logpoints.adapter.types import RemoteCall
    from logpoints.adapter.types import Reply
    from logpoints.connections import ConnectionBase
    from logpoints.protocol.messages import GenericRequest
    from logpoints.remote.client import RemoteDebugClient
    from logpoints.remote.results import CommandResult

logger = logging.getLogger(__name__)

# RemoteOperation -> RemoteDebugClient method
_CLIENT_METHODS: dict[RemoteOperation, str] = {
    RemoteOperation.LOAD_SOURCE: "load_source",
    RemoteOperation.SET_LOGPOINT: "set_logpoint",
    RemoteOperation.REMOVE_LOGPOINT: "remove_logpoint",
    RemoteOperation.LOADED_SCRIPTS: "loaded_scripts",
    RemoteOperation.CLOSE_SESSION: "close_session",
}


class DebugAdapterServer:
    """Server that speaks DAP with the client and drives the remote client.

    Requests are handled one at a time in arrival order.  Remote calls run as
    independent tasks, so their responses and events may be sent in any order
    relative to each other.
    """

    def __init__(self, connection: ConnectionBase, client: RemoteDebugClient):
        self.connection = connection
        self.client = client
        self.state = SessionState()
        self.running = False
        self.protocol_handler = ProtocolHandler()
        # Keep references to in-flight remote calls so they don't get GC'd
        self._bg_tasks: set[asyncio.Task] = set()
        self._loop_task: asyncio.Task | None = None

    @property
    def pending_calls(self) -> int:
        """Number of remote calls still in flight."""
        return len(self._bg_tasks)

    async def start(self) -> None:
        """Start the debug adapter server"""
        try:
            await self.connection.accept()
            self.running = True
            self._loop_task = asyncio.create_task(self._message_loop())
            await self._loop_task
        except Exception:
            logger.exception("Error starting debug adapter")
            raise
        finally:
            await self._cleanup()

    async def stop(self) -> None:
        """Stop the debug adapter server"""
        logger.info("Stopping debug adapter server")
        self.running = False
        loop_task = self._loop_task
        if loop_task is not None and loop_task is not asyncio.current_task():
            loop_task.cancel()

    async def _cleanup(self) -> None:
        """Clean up resources"""
        if self._bg_tasks:
            logger.debug("Leaving %d remote call(s) unfinished", len(self._bg_tasks))

        if self.connection and self.connection.is_connected:
            await self.connection.close()

    async def _message_loop(self) -> None:
        """Main message processing loop"""
        logger.info("Starting message processing loop")
        while self.running and self.connection.is_connected:
            message: Any = None
            try:
                message = await self.connection.read_message()
                if message is None:
                    logger.info("Client disconnected")
                    break

                await self._process_message(message)
            except asyncio.CancelledError:
                logger.info("Message loop cancelled")
                break
            except Exception as e:
                logger.exception("Error processing message")
                # Send error response if this was a request
                if isinstance(message, dict) and message.get("type") == "request":
                    await self.send_error_response(message, str(e))

        logger.info("Message loop ended")

    async def _process_message(self, message: Any) -> None:
        """Process an incoming DAP message"""
        try:
            message = self.protocol_handler.validate_message(message)
        except ProtocolError as e:
            logger.error("Invalid message: %s (%s)", message, e)
            return

        message_type = message["type"]

        if message_type == "request":
            await self._handle_request(cast("DAPRequest", message))
        elif message_type == "response":
            logger.warning("Received unexpected response: %s", message)
        else:
            logger.warning("Received unexpected event: %s", message)

    async def _handle_request(self, request: DAPRequest) -> None:
        """Handle an incoming DAP request"""
        command = request["command"]
        logger.info("Handling request: %s (seq: %s)", command, request.get("seq", "?"))

        try:
            outcome = handle_request(self.state, request)
        except Exception as e:
            logger.exception("Error handling request %s", command)
            await self.send_error_response(cast("dict[str, Any]", request), str(e))
            return

        await self._apply(request, outcome)

    async def _apply(self, request: DAPRequest, outcome: HandlerOutcome) -> None:
        """Adopt the new state, send what the handler produced, start its calls."""
        previous, self.state = self.state, outcome.state
        if previous.phase is not self.state.phase:
            logger.debug("Session %s -> %s", previous.phase.value, self.state.phase.value)
        if self.state.trace and not previous.trace:
            logging.getLogger("logpoints").setLevel(logging.DEBUG)
            logger.debug("Trace logging enabled by attach request")

        await self._deliver(request, outcome.reply, outcome.events)

        for call in outcome.calls:
            self._spawn(call)

        if outcome.shutdown:
            await self.stop()

    def _spawn(self, call: RemoteCall) -> None:
        task = asyncio.create_task(
            self._run_remote_call(call),
            name=f"{call.operation.value}-{call.origin['seq']}",
        )
        self._bg_tasks.add(task)
        task.add_done_callback(self._bg_tasks.discard)

    async def _run_remote_call(self, call: RemoteCall) -> None:
        result = await self._invoke(call)
        completion = complete_remote_call(call, result)
        await self._deliver(call.origin, completion.reply, completion.events)
        if completion.shutdown:
            await self.stop()

    async def _invoke(self, call: RemoteCall) -> CommandResult[Any]:
        """Run ``call`` on the remote client; exceptions become failures."""
        method = getattr(self.client, _CLIENT_METHODS[call.operation])
        target = call.target
        try:
            return await method(
                target.site_name, target.instance_affinity, target.credential, call.request
            )
        except Exception as e:
            logger.exception("Remote call %s raised", call.operation.value)
            return Failure(str(e) or e.__class__.__name__)

    async def _deliver(
        self, request: DAPRequest, reply: Reply | None, events: Iterable[Emit]
    ) -> None:
        if reply is not None:
            response = self.protocol_handler.create_response(
                cast("GenericRequest", request), reply.success, reply.body, reply.message
            )
            await self.send_message(cast("dict[str, Any]", response))

        for emit in events:
            await self.send_event(emit.event, emit.body)

    async def send_message(self, message: dict[str, Any]) -> None:
        """Send a DAP message to the client"""
        if not self.connection or not self.connection.is_connected:
            logger.warning("Cannot send message: No active connection")
            return

        try:
            await self.connection.write_message(message)
        except Exception:
            logger.exception("Error sending message")

    async def send_error_response(self, request: dict[str, Any], error_message: str) -> None:
        """Send an error response to a request"""
        response = self.protocol_handler.create_error_response(
            cast("GenericRequest", request), error_message
        )
        await self.send_message(cast("dict[str, Any]", response))

    async def send_event(self, event_name: str, body: dict[str, Any] | None = None) -> None:
        """Send an event to the client"""
        event = self.protocol_handler.create_event(event_name, body)
        await self.send_message(cast("dict[str, Any]", event))
