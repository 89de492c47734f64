"""Base class for remote log points debugging clients."""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    from logpoints.remote.operations import CloseSessionRequest
    from logpoints.remote.operations import LoadedScriptsRequest
    from logpoints.remote.operations import LoadSourceRequest
    from logpoints.remote.operations import PublishCredential
    from logpoints.remote.operations import RemoveLogpointRequest
    from logpoints.remote.operations import SetLogpointRequest
    from logpoints.remote.results import CommandResult


class RemoteDebugClient(ABC):
    """Operations offered by the remote debugging service.

    Every operation takes the target site, the optional instance-affinity
    token and the publish credential, plus the operation's request, and
    resolves to a ``CommandResult``.  Failures are reported as ``Failure``
    values rather than raised.
    """

    @abstractmethod
    async def load_source(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: LoadSourceRequest,
    ) -> CommandResult[str]:
        """Fetch the content of one loaded script."""

    @abstractmethod
    async def set_logpoint(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: SetLogpointRequest,
    ) -> CommandResult[dict[str, Any]]:
        """Create a logpoint; the payload describes it (including its id)."""

    @abstractmethod
    async def remove_logpoint(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: RemoveLogpointRequest,
    ) -> CommandResult[dict[str, Any]]:
        """Delete a logpoint."""

    @abstractmethod
    async def loaded_scripts(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: LoadedScriptsRequest,
    ) -> CommandResult[list[dict[str, Any]]]:
        """List the scripts loaded by the debuggee."""

    @abstractmethod
    async def close_session(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: CloseSessionRequest,
    ) -> CommandResult[dict[str, Any]]:
        """End the remote debug session."""
