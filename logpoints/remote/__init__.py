"""Client side of the remote log points debugging service."""

from logpoints.remote.client import RemoteDebugClient
from logpoints.remote.kudu import KuduLogPointsClient
from logpoints.remote.operations import CloseSessionRequest
from logpoints.remote.operations import LoadedScriptsRequest
from logpoints.remote.operations import LoadSourceRequest
from logpoints.remote.operations import PublishCredential
from logpoints.remote.operations import RemoteRequest
from logpoints.remote.operations import RemoteTarget
from logpoints.remote.operations import RemoveLogpointRequest
from logpoints.remote.operations import SetLogpointRequest
from logpoints.remote.results import CommandResult
from logpoints.remote.results import Failure
from logpoints.remote.results import Success

__all__ = [
    "CloseSessionRequest",
    "CommandResult",
    "Failure",
    "KuduLogPointsClient",
    "LoadSourceRequest",
    "LoadedScriptsRequest",
    "PublishCredential",
    "RemoteDebugClient",
    "RemoteRequest",
    "RemoteTarget",
    "RemoveLogpointRequest",
    "SetLogpointRequest",
    "Success",
]
