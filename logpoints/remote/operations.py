"""Request values sent to the remote log points debugging service.

One frozen dataclass per remote operation.  They are built fresh for every
call and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Union


@dataclass(frozen=True)
class PublishCredential:
    """Publishing username/password pair for the hosted application."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class RemoteTarget:
    """Where a remote call goes: the site, its instance and the credential."""

    site_name: str
    instance_affinity: str | None
    credential: PublishCredential


@dataclass(frozen=True)
class LoadSourceRequest:
    session_id: str
    debug_id: str
    source_id: str


@dataclass(frozen=True)
class SetLogpointRequest:
    session_id: str
    debug_id: str
    source_id: str
    line_number: int
    column_number: int
    expression: str


@dataclass(frozen=True)
class RemoveLogpointRequest:
    session_id: str
    debug_id: str
    logpoint_id: str


@dataclass(frozen=True)
class LoadedScriptsRequest:
    session_id: str
    debug_id: str


@dataclass(frozen=True)
class CloseSessionRequest:
    session_id: str


RemoteRequest = Union[
    LoadSourceRequest,
    SetLogpointRequest,
    RemoveLogpointRequest,
    LoadedScriptsRequest,
    CloseSessionRequest,
]
