"""Type definitions for the debug adapter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from typing import Any
from typing import Literal
from typing import TypedDict

from typing_extensions import NotRequired  # noqa: TC002

from logpoints.errors import create_dap_response

if TYPE_CHECKING:
    from logpoints.adapter.session import SessionState
    from logpoints.remote.operations import RemoteRequest
    from logpoints.remote.operations import RemoteTarget

__all__ = [
    "AttachArguments",
    "AttachRequest",
    "Completion",
    "DAPRequest",
    "Emit",
    "HandlerOutcome",
    "RemoteCall",
    "RemoteOperation",
    "Reply",
    "SetLogpointArguments",
]

# ---------------------------------------------------------------------------
# DAP Request Types
# ---------------------------------------------------------------------------


class DAPRequest(TypedDict):
    """Base structure for all DAP requests."""

    seq: int
    type: Literal["request"]
    command: str
    arguments: NotRequired[Any]


class AttachArguments(TypedDict):
    """Arguments the frontend passes when attaching to a hosted site."""

    siteName: str
    publishCredentialUsername: str
    publishCredentialPassword: str
    instanceId: NotRequired[str]
    sessionId: str
    debugId: str
    trace: NotRequired[bool]


class AttachRequest(TypedDict):
    seq: int
    type: Literal["request"]
    command: Literal["attach"]
    arguments: NotRequired[AttachArguments]


class SetLogpointArguments(TypedDict):
    """Arguments of the ``setLogpoint`` custom request (zero-based positions)."""

    scriptId: str
    lineNumber: int
    columnNumber: int
    expression: str


# ---------------------------------------------------------------------------
# Handler results
# ---------------------------------------------------------------------------


class RemoteOperation(Enum):
    """Remote debugging service operations."""

    LOAD_SOURCE = "loadSource"
    SET_LOGPOINT = "setLogpoint"
    REMOVE_LOGPOINT = "removeLogpoint"
    LOADED_SCRIPTS = "loadedScripts"
    CLOSE_SESSION = "closeSession"


@dataclass(frozen=True)
class Reply:
    """The response to send for the request being handled."""

    success: bool = True
    body: dict[str, Any] | None = None
    message: str | None = None

    @classmethod
    def from_error(cls, error: Exception, request: DAPRequest) -> Reply:
        response = create_dap_response(error, request["seq"], request["command"])
        return cls(success=False, body=response["body"], message=response["message"])


@dataclass(frozen=True)
class Emit:
    """An event to send."""

    event: str
    body: dict[str, Any] | None = None


@dataclass(frozen=True)
class RemoteCall:
    """A remote operation to start on behalf of ``origin``.

    ``target`` is captured from the session when the call is created, so
    running the call never consults session state.
    """

    operation: RemoteOperation
    request: RemoteRequest
    target: RemoteTarget
    origin: DAPRequest


@dataclass(frozen=True)
class HandlerOutcome:
    """What handling one request produced.

    The server adopts ``state``, sends ``reply`` then ``events``, and starts
    ``calls``.  ``shutdown`` ends the session once all of that is sent.
    """

    state: SessionState
    reply: Reply | None = None
    events: tuple[Emit, ...] = ()
    calls: tuple[RemoteCall, ...] = ()
    shutdown: bool = False


@dataclass(frozen=True)
class Completion:
    """What a finished remote call produced for its originating request."""

    reply: Reply | None = None
    events: tuple[Emit, ...] = ()
    shutdown: bool = False
