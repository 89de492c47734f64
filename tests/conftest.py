from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from logpoints.adapter.server import DebugAdapterServer
from logpoints.adapter.session import AdapterPhase
from logpoints.adapter.session import SessionIdentity
from logpoints.adapter.session import SessionState
from logpoints.connections.base import ConnectionBase
from logpoints.remote.client import RemoteDebugClient
from logpoints.remote.operations import PublishCredential
from logpoints.remote.results import Success

logger = logging.getLogger(__name__)

ATTACH_ARGUMENTS: dict[str, Any] = {
    "siteName": "contoso-web",
    "publishCredentialUsername": "$contoso-web",
    "publishCredentialPassword": "s3cret",
    "instanceId": "instance-0a1b",
    "sessionId": "session-42",
    "debugId": "debuggee-7",
}


class FakeRemoteClient(RemoteDebugClient):
    """Records remote calls and answers them with canned results.

    ``results`` maps a client method name to the ``CommandResult`` (or the
    exception) to produce.  ``hold(name)`` makes calls to that method wait
    until ``release(name)``.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str | None, PublishCredential, Any]] = []
        self.results: dict[str, Any] = {
            "load_source": Success("console.log('hi');"),
            "set_logpoint": Success({"data": {"logpointId": "lp-1"}}),
            "remove_logpoint": Success({}),
            "loaded_scripts": Success([]),
            "close_session": Success({}),
        }
        self._gates: dict[str, asyncio.Event] = {}

    def hold(self, name: str) -> None:
        self._gates[name] = asyncio.Event()

    def release(self, name: str) -> None:
        self._gates.pop(name).set()

    def calls_to(self, name: str) -> list[Any]:
        return [call for call in self.calls if call[0] == name]

    async def _answer(self, name, site_name, instance_affinity, credential, request):
        self.calls.append((name, site_name, instance_affinity, credential, request))
        gate = self._gates.get(name)
        if gate is not None:
            await gate.wait()
        result = self.results[name]
        if isinstance(result, Exception):
            raise result
        return result

    async def load_source(self, site_name, instance_affinity, credential, request):
        return await self._answer("load_source", site_name, instance_affinity, credential, request)

    async def set_logpoint(self, site_name, instance_affinity, credential, request):
        return await self._answer("set_logpoint", site_name, instance_affinity, credential, request)

    async def remove_logpoint(self, site_name, instance_affinity, credential, request):
        return await self._answer(
            "remove_logpoint", site_name, instance_affinity, credential, request
        )

    async def loaded_scripts(self, site_name, instance_affinity, credential, request):
        return await self._answer(
            "loaded_scripts", site_name, instance_affinity, credential, request
        )

    async def close_session(self, site_name, instance_affinity, credential, request):
        return await self._answer("close_session", site_name, instance_affinity, credential, request)


class MemoryConnection(ConnectionBase):
    """In-memory DAP connection: tests feed requests and inspect what was sent."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self._incoming: asyncio.Queue | None = None

    @property
    def incoming(self) -> asyncio.Queue:
        if self._incoming is None:
            self._incoming = asyncio.Queue()
        return self._incoming

    async def accept(self) -> None:
        self._is_connected = True

    async def close(self) -> None:
        self._is_connected = False
        self.closed = True

    async def read_message(self) -> Any | None:
        return await self.incoming.get()

    async def write_message(self, message: dict[str, Any]) -> None:
        self.sent.append(message)

    def feed(self, command: str, arguments: Any = None, *, seq: int) -> None:
        request: dict[str, Any] = {"seq": seq, "type": "request", "command": command}
        if arguments is not None:
            request["arguments"] = arguments
        self.incoming.put_nowait(request)

    def responses(self, command: str | None = None) -> list[dict[str, Any]]:
        return [
            m
            for m in self.sent
            if m["type"] == "response" and (command is None or m["command"] == command)
        ]

    def events(self, name: str | None = None) -> list[dict[str, Any]]:
        return [
            m for m in self.sent if m["type"] == "event" and (name is None or m["event"] == name)
        ]

    async def wait_until(self, predicate, timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError(f"condition not met; sent so far: {self.sent}")
            await asyncio.sleep(0.01)


@pytest.fixture
def attach_arguments() -> dict[str, Any]:
    return dict(ATTACH_ARGUMENTS)


@pytest.fixture
def identity() -> SessionIdentity:
    return SessionIdentity(
        session_id="session-42",
        debug_id="debuggee-7",
        site_name="contoso-web",
        instance_affinity="instance-0a1b",
        credential=PublishCredential("$contoso-web", "s3cret"),
    )


@pytest.fixture
def attached_state(identity) -> SessionState:
    return SessionState(phase=AdapterPhase.ATTACHED, identity=identity)


@pytest.fixture
def fake_client() -> FakeRemoteClient:
    return FakeRemoteClient()


@pytest.fixture
def connection() -> MemoryConnection:
    return MemoryConnection()


@pytest.fixture
def server(connection, fake_client) -> DebugAdapterServer:
    return DebugAdapterServer(connection, fake_client)
