"""Core protocol message types.

This module contains the runtime-friendly Request/Response/Event shapes used
by the ProtocolFactory and ProtocolHandler when constructing and parsing
messages, plus the DAP structures this adapter sends back.
"""

from __future__ import annotations

from typing import Any
from typing import Literal
from typing import TypedDict
from typing import Union

from typing_extensions import NotRequired

# Type for the top-level 'type' field in protocol messages.
MessageType = Literal["request", "response", "event"]


class GenericRequest(TypedDict):
    seq: int
    type: Literal["request"]
    command: str
    arguments: NotRequired[Any]


class GenericResponse(TypedDict):
    seq: int
    type: Literal["response"]
    request_seq: int
    success: bool
    command: str
    message: NotRequired[str]
    body: NotRequired[Any]


class GenericEvent(TypedDict):
    seq: int
    type: Literal["event"]
    event: str
    body: NotRequired[Any]


class ErrorResponse(TypedDict):
    """On error (whenever success is false), the body can provide more details."""

    seq: int
    type: Literal["response"]
    request_seq: int
    success: bool
    command: str
    message: NotRequired[str]
    body: dict[str, Any]  # The body with error details


ProtocolMessage = Union[GenericRequest, GenericResponse, GenericEvent]


# DAP structures


class Source(TypedDict):
    """A source is a descriptor for source code."""

    name: NotRequired[str]  # The short name of the source
    path: NotRequired[str]  # The path of the source to be shown in the UI
    sourceReference: NotRequired[int]  # If > 0, contents come through a loadSource request


class Thread(TypedDict):
    """A Thread."""

    id: int  # Unique identifier for the thread
    name: str  # The name of the thread


class Capabilities(TypedDict, total=False):
    """Capabilities reported in the initialize response."""

    supportsConfigurationDoneRequest: bool
    supportsFunctionBreakpoints: bool
    supportsConditionalBreakpoints: bool
    supportsHitConditionalBreakpoints: bool
    supportsEvaluateForHovers: bool
    supportsStepBack: bool
    supportsSetVariable: bool
    supportsRestartFrame: bool
    supportsStepInTargetsRequest: bool
    supportsGotoTargetsRequest: bool
    supportsCompletionsRequest: bool
    supportsRestartRequest: bool
    supportsExceptionOptions: bool
    supportsValueFormattingOptions: bool
    supportsExceptionInfoRequest: bool
    supportTerminateDebuggee: bool
    supportsDelayedStackTraceLoading: bool
    supportsLoadedSourcesRequest: bool
    supportsLogPoints: bool
