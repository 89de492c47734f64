"""Tests for DAP message validation and construction."""

from __future__ import annotations

import pytest

from logpoints.errors import ProtocolError
from logpoints.protocol import ProtocolFactory
from logpoints.protocol import ProtocolHandler


@pytest.fixture
def handler():
    return ProtocolHandler()


def test_sequence_numbers_increase(handler):
    event = handler.create_event("initialized")
    response = handler.create_response({"seq": 1, "type": "request", "command": "threads"}, True)
    error = handler.create_error_response({"seq": 2, "type": "request", "command": "x"}, "no")

    assert [event["seq"], response["seq"], error["seq"]] == [1, 2, 3]


def test_factory_seq_start():
    factory = ProtocolFactory(seq_start=10)

    assert factory.create_event("initialized")["seq"] == 10
    assert factory.next_seq() == 11


def test_create_response_success(handler):
    request = {"seq": 7, "type": "request", "command": "setBreakpoints"}
    response = handler.create_response(request, True, {"breakpoints": []})

    assert response["type"] == "response"
    assert response["request_seq"] == 7
    assert response["command"] == "setBreakpoints"
    assert response["success"] is True
    assert response["body"] == {"breakpoints": []}
    assert "message" not in response


def test_create_response_without_body(handler):
    response = handler.create_response({"seq": 1, "type": "request", "command": "disconnect"}, True)

    assert "body" not in response


def test_create_error_response(handler):
    request = {"seq": 4, "type": "request", "command": "threads"}
    response = handler.create_error_response(request, "something broke")

    assert response["success"] is False
    assert response["message"] == "something broke"
    assert response["body"] == {"error": "ProtocolError", "details": {"command": "threads"}}


def test_create_event_body(handler):
    event = handler.create_event("loadedSource", {"reason": "new"})

    assert event["type"] == "event"
    assert event["event"] == "loadedSource"
    assert event["body"] == {"reason": "new"}


@pytest.mark.parametrize(
    "message",
    [
        {"seq": 1, "type": "request", "command": "initialize"},
        {"seq": 1, "type": "event", "event": "output"},
        {"seq": 1, "type": "response", "request_seq": 1, "success": True, "command": "x"},
    ],
)
def test_validate_accepts_well_formed_messages(handler, message):
    assert handler.validate_message(message) is message


@pytest.mark.parametrize(
    ("message", "error"),
    [
        ([1, 2], "not a JSON object"),
        ({"type": "request", "command": "x"}, "'seq'"),
        ({"seq": 1, "command": "x"}, "'type'"),
        ({"seq": 1, "type": "request"}, "'command'"),
        ({"seq": 1, "type": "response", "success": True, "command": "x"}, "'request_seq'"),
        ({"seq": 1, "type": "event"}, "'event'"),
        ({"seq": 1, "type": "notification"}, "Invalid message type"),
    ],
)
def test_validate_rejects_malformed_messages(handler, message, error):
    with pytest.raises(ProtocolError, match=error):
        handler.validate_message(message)
