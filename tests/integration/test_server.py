"""End-to-end tests for the debug adapter server over an in-memory connection."""

from __future__ import annotations

import asyncio
import logging

import pytest

from logpoints.adapter.session import AdapterPhase
from logpoints.remote.results import Failure
from logpoints.remote.results import Success

SCRIPTS = [
    {"name": "server.js", "path": "/home/site/wwwroot/server.js", "sourceId": "31"},
    {"name": "util.js", "path": "/home/site/wwwroot/lib/util.js", "sourceId": "32"},
]


async def start(server) -> asyncio.Task:
    task = asyncio.create_task(server.start())
    await asyncio.sleep(0)
    return task


async def attach(connection, arguments) -> None:
    connection.feed("initialize", {"adapterID": "logpoints", "linesStartAt1": True}, seq=1)
    connection.feed("attach", arguments, seq=2)
    await connection.wait_until(lambda: connection.responses("attach"))


def summary(connection) -> list[str]:
    return [
        m["command"] if m["type"] == "response" else f"event:{m['event']}"
        for m in connection.sent
    ]


@pytest.mark.asyncio
async def test_round_trip(server, connection, fake_client, attach_arguments):
    fake_client.results["loaded_scripts"] = Success(SCRIPTS)
    task = await start(server)

    await attach(connection, attach_arguments)
    connection.feed("threads", seq=3)
    await connection.wait_until(lambda: len(connection.events("loadedSource")) == 2)
    connection.feed("disconnect", {"restart": False}, seq=4)
    await asyncio.wait_for(task, timeout=2)

    assert summary(connection) == [
        "initialize",
        "event:initialized",
        "attach",
        "threads",
        "event:loadedSource",
        "event:loadedSource",
        "disconnect",
    ]
    sources = [e["body"] for e in connection.events("loadedSource")]
    assert sources == [
        {"name": "server.js", "path": "/home/site/wwwroot/server.js", "sourceReference": 31},
        {"name": "util.js", "path": "/home/site/wwwroot/lib/util.js", "sourceReference": 32},
    ]
    (threads,) = connection.responses("threads")
    assert threads["request_seq"] == 3
    assert threads["body"] == {"threads": [{"id": 1, "name": "thread 1"}]}
    (disconnect,) = connection.responses("disconnect")
    assert disconnect["request_seq"] == 4
    assert disconnect["success"] is True

    seqs = [m["seq"] for m in connection.sent]
    assert seqs == sorted(set(seqs))
    assert server.state.phase is AdapterPhase.DISCONNECTED
    assert connection.closed


@pytest.mark.asyncio
async def test_remote_calls_use_attach_identity(server, connection, fake_client, attach_arguments):
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("loadSource", "31", seq=3)
    await connection.wait_until(lambda: connection.responses("loadSource"))

    ((name, site_name, affinity, credential, request),) = fake_client.calls
    assert name == "load_source"
    assert site_name == "contoso-web"
    assert affinity == "instance-0a1b"
    assert (credential.username, credential.password) == ("$contoso-web", "s3cret")
    assert (request.session_id, request.debug_id, request.source_id) == (
        "session-42",
        "debuggee-7",
        "31",
    )

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_loaded_scripts_failure_emits_nothing(
    server, connection, fake_client, attach_arguments
):
    fake_client.results["loaded_scripts"] = Failure("agent unreachable")
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("threads", seq=3)
    await connection.wait_until(lambda: fake_client.calls_to("loaded_scripts"))
    await connection.wait_until(lambda: server.pending_calls == 0)
    connection.feed("disconnect", seq=4)
    await asyncio.wait_for(task, timeout=2)

    assert connection.events("loadedSource") == []
    assert len(connection.responses("threads")) == 1


@pytest.mark.asyncio
async def test_load_source_and_set_logpoint_responses(
    server, connection, fake_client, attach_arguments
):
    fake_client.results["set_logpoint"] = Failure("Line 900 is out of range")
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("loadSource", "31", seq=3)
    connection.feed(
        "setLogpoint",
        {"scriptId": "31", "lineNumber": 899, "columnNumber": 0, "expression": "req.url"},
        seq=4,
    )
    await connection.wait_until(
        lambda: connection.responses("loadSource") and connection.responses("setLogpoint")
    )

    (load,) = connection.responses("loadSource")
    assert load["request_seq"] == 3
    assert load["success"] is True
    assert load["body"] == {"content": "console.log('hi');"}
    (logpoint,) = connection.responses("setLogpoint")
    assert logpoint["request_seq"] == 4
    assert logpoint["success"] is True
    assert logpoint["body"] == {"error": "Line 900 is out of range"}

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_completions_may_arrive_out_of_order(
    server, connection, fake_client, attach_arguments
):
    fake_client.hold("load_source")
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("loadSource", "31", seq=3)
    connection.feed("setLogpoint", {"scriptId": "31", "lineNumber": 1}, seq=4)
    await connection.wait_until(lambda: connection.responses("setLogpoint"))
    assert connection.responses("loadSource") == []

    fake_client.release("load_source")
    await connection.wait_until(lambda: connection.responses("loadSource"))
    assert connection.responses("loadSource")[0]["request_seq"] == 3

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_client_exception_becomes_in_band_error(
    server, connection, fake_client, attach_arguments
):
    fake_client.results["load_source"] = RuntimeError("connection reset by peer")
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("loadSource", "31", seq=3)
    await connection.wait_until(lambda: connection.responses("loadSource"))

    (load,) = connection.responses("loadSource")
    assert load["body"] == {"error": "connection reset by peer"}

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
@pytest.mark.parametrize("result", [Success({}), Failure("logpoint not found")])
async def test_remove_logpoint_acknowledged_once(
    server, connection, fake_client, attach_arguments, result
):
    fake_client.results["remove_logpoint"] = result
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("removeLogpoint", "lp-1", seq=3)
    await connection.wait_until(lambda: fake_client.calls_to("remove_logpoint"))
    await connection.wait_until(lambda: server.pending_calls == 0)

    (ack,) = connection.responses("removeLogpoint")
    assert ack["request_seq"] == 3
    assert ack["success"] is True
    assert "body" not in ack

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_unknown_custom_command_gets_no_response(server, connection, attach_arguments):
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("fooBar", {"expression": "1 + 1"}, seq=3)
    connection.feed("setBreakpoints", {"source": {"path": "/a.js"}}, seq=4)
    await connection.wait_until(lambda: connection.responses("setBreakpoints"))

    assert [r["request_seq"] for r in connection.responses()] == [1, 2, 4]

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_standard_request_without_handler_is_acknowledged(
    server, connection, fake_client, attach_arguments
):
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("evaluate", {"expression": "1 + 1"}, seq=3)
    connection.feed("source", {"sourceReference": 31}, seq=4)
    await connection.wait_until(lambda: connection.responses("source"))

    (evaluate,) = connection.responses("evaluate")
    assert evaluate["request_seq"] == 3
    assert evaluate["success"] is True
    assert len(connection.responses("source")) == 1
    assert fake_client.calls == []

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
@pytest.mark.parametrize("result", [Success({}), Failure("session already closed")])
async def test_disconnect_waits_for_close_session(
    server, connection, fake_client, attach_arguments, result
):
    fake_client.results["close_session"] = result
    fake_client.hold("close_session")
    task = await start(server)
    await attach(connection, attach_arguments)

    connection.feed("disconnect", seq=3)
    await connection.wait_until(lambda: fake_client.calls_to("close_session"))
    await asyncio.sleep(0.05)
    assert connection.responses("disconnect") == []
    assert not task.done()

    fake_client.release("close_session")
    await asyncio.wait_for(task, timeout=2)

    (disconnect,) = connection.responses("disconnect")
    assert disconnect["success"] is True
    assert connection.closed


@pytest.mark.asyncio
async def test_disconnect_before_attach_replies_at_once(server, connection, fake_client):
    task = await start(server)
    connection.feed("initialize", {"adapterID": "logpoints"}, seq=1)
    connection.feed("disconnect", seq=2)
    await asyncio.wait_for(task, timeout=2)

    assert len(connection.responses("disconnect")) == 1
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_out_of_state_request_fails(server, connection, fake_client):
    task = await start(server)
    connection.feed("initialize", {"adapterID": "logpoints"}, seq=1)
    connection.feed("threads", seq=2)
    await connection.wait_until(lambda: connection.responses("threads"))

    (threads,) = connection.responses("threads")
    assert threads["success"] is False
    assert threads["body"]["error"] == "ProtocolError"
    assert server.state.phase is AdapterPhase.INITIALIZED
    assert fake_client.calls == []

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_attach_with_bad_arguments_fails(server, connection, attach_arguments):
    attach_arguments["siteName"] = None
    task = await start(server)
    await attach(connection, attach_arguments)

    (response,) = connection.responses("attach")
    assert response["success"] is False
    assert response["body"]["details"]["config_key"] == "siteName"
    assert server.state.phase is AdapterPhase.INITIALIZED

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_trace_raises_log_level(server, connection, attach_arguments):
    package_logger = logging.getLogger("logpoints")
    previous_level = package_logger.level
    attach_arguments["trace"] = True
    task = await start(server)
    try:
        await attach(connection, attach_arguments)
        assert package_logger.level == logging.DEBUG
    finally:
        package_logger.setLevel(previous_level)
        await server.stop()
        await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_malformed_message_is_skipped(server, connection):
    task = await start(server)
    connection.incoming.put_nowait({"type": "request", "command": "initialize"})
    connection.incoming.put_nowait("garbage")
    connection.feed("initialize", {"adapterID": "logpoints"}, seq=1)
    await connection.wait_until(lambda: connection.responses("initialize"))

    assert len(connection.responses()) == 1

    await server.stop()
    await asyncio.wait_for(task, timeout=2)


@pytest.mark.asyncio
async def test_client_eof_ends_server(server, connection):
    task = await start(server)
    connection.incoming.put_nowait(None)
    await asyncio.wait_for(task, timeout=2)

    assert connection.sent == []
    assert connection.closed
