"""Debug session state.

The session is an immutable value: request handlers receive the current
``SessionState`` and return a new one.  The identity captured on ``attach``
is therefore written exactly once and only read afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar

from logpoints.errors import ProtocolError
from logpoints.remote.operations import PublishCredential
from logpoints.remote.operations import RemoteTarget

if TYPE_CHECKING:
    from logpoints.config import AttachConfig


class AdapterPhase(Enum):
    """Lifecycle phases of a debug session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    ATTACHED = "attached"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class SessionIdentity:
    """Who and where the session debugs."""

    session_id: str
    debug_id: str
    site_name: str
    instance_affinity: str | None
    credential: PublishCredential

    @classmethod
    def from_config(cls, config: AttachConfig) -> SessionIdentity:
        return cls(
            session_id=config.session_id,
            debug_id=config.debug_id,
            site_name=config.site_name,
            instance_affinity=config.instance_id,
            credential=PublishCredential(config.publish_username, config.publish_password),
        )

    @property
    def target(self) -> RemoteTarget:
        return RemoteTarget(self.site_name, self.instance_affinity, self.credential)


@dataclass(frozen=True)
class SessionState:
    """Everything the adapter knows about its session."""

    _VALID_TRANSITIONS: ClassVar[dict[AdapterPhase, set[AdapterPhase]]] = {
        AdapterPhase.UNINITIALIZED: {AdapterPhase.INITIALIZED, AdapterPhase.DISCONNECTED},
        AdapterPhase.INITIALIZED: {AdapterPhase.ATTACHED, AdapterPhase.DISCONNECTED},
        AdapterPhase.ATTACHED: {AdapterPhase.DISCONNECTED},
        AdapterPhase.DISCONNECTED: set(),  # Final state
    }

    phase: AdapterPhase = AdapterPhase.UNINITIALIZED
    identity: SessionIdentity | None = None
    trace: bool = False

    # The debugger side counts lines and columns from 0; the client says
    # what it uses in the initialize request.  Recorded for the protocol
    # contract only: setLogpoint positions are passed through unchanged.
    debugger_lines_start_at1: bool = False
    debugger_columns_start_at1: bool = False
    client_lines_start_at1: bool = True
    client_columns_start_at1: bool = True

    def require(self, command: str, *phases: AdapterPhase) -> None:
        """Raise ProtocolError unless the session is in one of ``phases``."""
        if self.phase not in phases:
            expected = ", ".join(p.value for p in phases)
            raise ProtocolError(
                f"'{command}' is not valid while the session is {self.phase.value}"
                f" (expected: {expected})",
                command=command,
                details={"phase": self.phase.value},
            )

    def transition_to(self, phase: AdapterPhase, **changes: Any) -> SessionState:
        """Return a copy of this state in ``phase`` with ``changes`` applied.

        Raises:
            ProtocolError: If the transition is invalid
        """
        if phase not in self._VALID_TRANSITIONS[self.phase]:
            raise ProtocolError(
                f"Invalid session transition: {self.phase.value} -> {phase.value}",
                details={"from": self.phase.value, "to": phase.value},
            )
        return replace(self, phase=phase, **changes)

    @property
    def attached_identity(self) -> SessionIdentity:
        """The attach-time identity; only valid once attached."""
        if self.identity is None:
            raise ProtocolError("Session is not attached")
        return self.identity
