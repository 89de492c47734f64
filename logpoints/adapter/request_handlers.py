"""DAP request handlers.

Every handler is a plain function ``(state, request) -> HandlerOutcome``: it
never performs I/O.  Remote work is described by ``RemoteCall`` values that
the server runs; when one finishes, ``complete_remote_call`` maps its result
to the reply and events for the request that started it.

Other standard DAP requests get a plain acknowledgement.  Anything else is
treated as a custom request (``loadSource``, ``setLogpoint``,
``removeLogpoint``); unknown custom commands get no response at all.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from logpoints.adapter.scripts import loaded_source_events
from logpoints.adapter.session import AdapterPhase
from logpoints.adapter.session import SessionIdentity
from logpoints.adapter.types import Completion
from logpoints.adapter.types import Emit
from logpoints.adapter.types import HandlerOutcome
from logpoints.adapter.types import RemoteCall
from logpoints.adapter.types import RemoteOperation
from logpoints.adapter.types import Reply
from logpoints.config import AttachConfig
from logpoints.errors import handle_adapter_errors
from logpoints.remote.operations import CloseSessionRequest
from logpoints.remote.operations import LoadedScriptsRequest
from logpoints.remote.operations import LoadSourceRequest
from logpoints.remote.operations import RemoveLogpointRequest
from logpoints.remote.operations import SetLogpointRequest

if TYPE_CHECKING:
    from collections.abc import Callable

    from logpoints.adapter.session import SessionState
    from logpoints.adapter.types import AttachRequest
    from logpoints.adapter.types import DAPRequest
    from logpoints.adapter.types import SetLogpointArguments
    from logpoints.protocol.messages import Capabilities
    from logpoints.protocol.messages import Thread
    from logpoints.remote.results import CommandResult

__all__ = ["complete_remote_call", "handle_request"]

logger = logging.getLogger(__name__)

THREAD_ID = 1
THREAD_NAME = "thread 1"

CAPABILITIES: Capabilities = {
    "supportsConfigurationDoneRequest": False,
    "supportsFunctionBreakpoints": False,
    "supportsConditionalBreakpoints": False,
    "supportsHitConditionalBreakpoints": False,
    "supportsEvaluateForHovers": False,
    "supportsStepBack": False,
    "supportsSetVariable": False,
    "supportsRestartFrame": False,
    "supportsStepInTargetsRequest": False,
    "supportsGotoTargetsRequest": False,
    "supportsCompletionsRequest": False,
    "supportsRestartRequest": False,
    "supportsExceptionOptions": False,
    "supportsValueFormattingOptions": False,
    "supportsExceptionInfoRequest": False,
    "supportTerminateDebuggee": False,
    "supportsDelayedStackTraceLoading": False,
    "supportsLoadedSourcesRequest": False,
    "supportsLogPoints": False,
}


def _rejected(error: Exception, state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """Answer a request that could not be handled, leaving state untouched."""
    return HandlerOutcome(state, reply=Reply.from_error(error, request))


def _arguments(request: DAPRequest) -> Any:
    return request.get("arguments")


# ---------------------------------------------------------------------------
# Standard requests
# ---------------------------------------------------------------------------


@handle_adapter_errors("initialize", fallback=_rejected)
def handle_initialize(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """Record the client's conventions, report capabilities, then signal
    ``initialized``."""
    state.require("initialize", AdapterPhase.UNINITIALIZED)
    args = _arguments(request) or {}

    new_state = state.transition_to(
        AdapterPhase.INITIALIZED,
        client_lines_start_at1=args.get("linesStartAt1", True) is not False,
        client_columns_start_at1=args.get("columnsStartAt1", True) is not False,
    )
    return HandlerOutcome(
        new_state,
        reply=Reply(body=dict(CAPABILITIES)),
        events=(Emit("initialized"),),
    )


@handle_adapter_errors("attach", fallback=_rejected)
def handle_attach(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """Capture the session identity.  No remote calls are made."""
    state.require("attach", AdapterPhase.INITIALIZED)
    config = AttachConfig.from_attach_request(cast("AttachRequest", request))

    identity = SessionIdentity.from_config(config)
    new_state = state.transition_to(AdapterPhase.ATTACHED, identity=identity, trace=config.trace)
    logger.info(
        "Attached to %s (session %s, debuggee %s, instance %s)",
        identity.site_name,
        identity.session_id,
        identity.debug_id,
        identity.instance_affinity or "any",
    )
    return HandlerOutcome(new_state, reply=Reply(body={"supportsConfigurationDoneRequest": False}))


@handle_adapter_errors("setBreakpoints", fallback=_rejected)
def handle_set_breakpoints(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """Line breakpoints are not supported; logpoints go through setLogpoint."""
    state.require("setBreakpoints", AdapterPhase.INITIALIZED, AdapterPhase.ATTACHED)
    return HandlerOutcome(state, reply=Reply(body={"breakpoints": []}))


@handle_adapter_errors("configurationDone", fallback=_rejected)
def handle_configuration_done(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    state.require("configurationDone", AdapterPhase.INITIALIZED, AdapterPhase.ATTACHED)
    return HandlerOutcome(state, reply=Reply())


@handle_adapter_errors("threads", fallback=_rejected)
def handle_threads(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """Report the single logical thread and start discovering loaded scripts."""
    state.require("threads", AdapterPhase.ATTACHED)
    identity = state.attached_identity

    fetch = RemoteCall(
        RemoteOperation.LOADED_SCRIPTS,
        LoadedScriptsRequest(identity.session_id, identity.debug_id),
        identity.target,
        request,
    )
    thread: Thread = {"id": THREAD_ID, "name": THREAD_NAME}
    return HandlerOutcome(
        state,
        reply=Reply(body={"threads": [thread]}),
        calls=(fetch,),
    )


@handle_adapter_errors("disconnect", fallback=_rejected)
def handle_disconnect(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """End the session.

    An attached session closes its remote session first and replies when that
    call has finished, whatever its result.
    """
    new_state = state.transition_to(AdapterPhase.DISCONNECTED)
    if state.identity is None:
        return HandlerOutcome(new_state, reply=Reply(), shutdown=True)

    identity = state.identity
    close = RemoteCall(
        RemoteOperation.CLOSE_SESSION,
        CloseSessionRequest(identity.session_id),
        identity.target,
        request,
    )
    return HandlerOutcome(new_state, calls=(close,))


# ---------------------------------------------------------------------------
# Custom requests
# ---------------------------------------------------------------------------


@handle_adapter_errors("loadSource", fallback=_rejected)
def handle_load_source(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    state.require("loadSource", AdapterPhase.ATTACHED)
    identity = state.attached_identity

    call = RemoteCall(
        RemoteOperation.LOAD_SOURCE,
        LoadSourceRequest(identity.session_id, identity.debug_id, _arguments(request)),
        identity.target,
        request,
    )
    return HandlerOutcome(state, calls=(call,))


@handle_adapter_errors("setLogpoint", fallback=_rejected)
def handle_set_logpoint(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    state.require("setLogpoint", AdapterPhase.ATTACHED)
    identity = state.attached_identity
    args = cast("SetLogpointArguments", _arguments(request) or {})

    call = RemoteCall(
        RemoteOperation.SET_LOGPOINT,
        SetLogpointRequest(
            session_id=identity.session_id,
            debug_id=identity.debug_id,
            source_id=args.get("scriptId"),
            line_number=args.get("lineNumber"),
            column_number=args.get("columnNumber"),
            expression=args.get("expression"),
        ),
        identity.target,
        request,
    )
    return HandlerOutcome(state, calls=(call,))


@handle_adapter_errors("removeLogpoint", fallback=_rejected)
def handle_remove_logpoint(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """Acknowledge at once; the removal result is only logged."""
    state.require("removeLogpoint", AdapterPhase.ATTACHED)
    identity = state.attached_identity

    call = RemoteCall(
        RemoteOperation.REMOVE_LOGPOINT,
        RemoveLogpointRequest(identity.session_id, identity.debug_id, _arguments(request)),
        identity.target,
        request,
    )
    return HandlerOutcome(state, reply=Reply(), calls=(call,))


@handle_adapter_errors("unsupported request", fallback=_rejected)
def handle_unsupported_request(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """Acknowledge a standard request this adapter has no behaviour for."""
    command = request["command"]
    state.require(command, AdapterPhase.INITIALIZED, AdapterPhase.ATTACHED)
    logger.debug("Acknowledging unsupported request: %s", command)
    return HandlerOutcome(state, reply=Reply())


def handle_custom_request(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    command = request["command"]
    handler = CUSTOM_HANDLERS.get(command)
    if handler is None:
        # No response: the client's own request timeout reports the failure.
        logger.warning("Ignoring unknown custom request: %s (seq %s)", command, request["seq"])
        return HandlerOutcome(state)
    return handler(state, request)


STANDARD_HANDLERS: dict[str, Callable[[SessionState, DAPRequest], HandlerOutcome]] = {
    "initialize": handle_initialize,
    "attach": handle_attach,
    "setBreakpoints": handle_set_breakpoints,
    "configurationDone": handle_configuration_done,
    "threads": handle_threads,
    "disconnect": handle_disconnect,
}

CUSTOM_HANDLERS: dict[str, Callable[[SessionState, DAPRequest], HandlerOutcome]] = {
    "loadSource": handle_load_source,
    "setLogpoint": handle_set_logpoint,
    "removeLogpoint": handle_remove_logpoint,
}

# Standard DAP requests; those without a handler above are only acknowledged.
DAP_COMMANDS = frozenset(
    {
        "attach", "breakpointLocations", "cancel", "completions", "configurationDone",
        "continue", "dataBreakpointInfo", "disassemble", "disconnect", "evaluate",
        "exceptionInfo", "goto", "gotoTargets", "initialize", "launch", "loadedSources",
        "locations", "modules", "next", "pause", "readMemory", "restart", "restartFrame",
        "reverseContinue", "scopes", "setBreakpoints", "setDataBreakpoints",
        "setExceptionBreakpoints", "setExpression", "setFunctionBreakpoints",
        "setInstructionBreakpoints", "setVariable", "source", "stackTrace", "stepBack",
        "stepIn", "stepInTargets", "stepOut", "terminate", "terminateThreads", "threads",
        "variables", "writeMemory",
    }
)  # fmt: skip


def handle_request(state: SessionState, request: DAPRequest) -> HandlerOutcome:
    """Handle a DAP request against ``state``."""
    command = request["command"]
    handler = STANDARD_HANDLERS.get(command)
    if handler is None:
        handler = handle_unsupported_request if command in DAP_COMMANDS else handle_custom_request
    return handler(state, request)


# ---------------------------------------------------------------------------
# Remote call completions
# ---------------------------------------------------------------------------


def _in_band(result: CommandResult[Any], success_body: Callable[[Any], dict[str, Any]]) -> Reply:
    """Remote failures are reported inside a successful response."""
    if result.is_successful:
        return Reply(body=success_body(result.payload))
    return Reply(body={"error": result.error})


def _complete_load_source(call: RemoteCall, result: CommandResult[Any]) -> Completion:
    return Completion(reply=_in_band(result, lambda content: {"content": content}))


def _complete_set_logpoint(call: RemoteCall, result: CommandResult[Any]) -> Completion:
    return Completion(reply=_in_band(result, lambda payload: payload))


def _complete_remove_logpoint(call: RemoteCall, result: CommandResult[Any]) -> Completion:
    logger.info("removeLogpoint received. %r", result)
    return Completion()


def _complete_loaded_scripts(call: RemoteCall, result: CommandResult[Any]) -> Completion:
    if not result.is_successful:
        logger.debug("Loaded scripts unavailable: %s", result.error)
        return Completion()
    return Completion(events=loaded_source_events(result.payload))


def _complete_close_session(call: RemoteCall, result: CommandResult[Any]) -> Completion:
    # The reply is an acknowledgement the client does not inspect, so it is
    # sent whatever the remote outcome.
    if not result.is_successful:
        logger.warning("Closing remote session failed: %s", result.error)
    return Completion(reply=Reply(), shutdown=True)


_COMPLETIONS: dict[RemoteOperation, Callable[[RemoteCall, CommandResult[Any]], Completion]] = {
    RemoteOperation.LOAD_SOURCE: _complete_load_source,
    RemoteOperation.SET_LOGPOINT: _complete_set_logpoint,
    RemoteOperation.REMOVE_LOGPOINT: _complete_remove_logpoint,
    RemoteOperation.LOADED_SCRIPTS: _complete_loaded_scripts,
    RemoteOperation.CLOSE_SESSION: _complete_close_session,
}


def complete_remote_call(call: RemoteCall, result: CommandResult[Any]) -> Completion:
    """Map the result of ``call`` to what is sent for its originating request."""
    return _COMPLETIONS[call.operation](call, result)
