from __future__ import annotations

import pytest

from conftest import drain
from notify_ls.config import DEFAULT_CAPABILITIES, ServerConfig
from notify_ls.jsonrpc import JsonRpcError, SessionTerminated, UnknownMethod
from notify_ls.lifecycle import SessionState
from notify_ls.server import NotifyServer


def test_initialize_resolves_synchronously_before_start(server) -> None:
    assert server.state is SessionState.UNINITIALIZED
    handle = server.request("initialize", {})
    assert handle.handled is True
    assert handle.result.done()
    assert handle.result.result() == {"capabilities": DEFAULT_CAPABILITIES}


def test_initialize_payload_is_a_copy(server) -> None:
    first = server.request("initialize").result.result()
    first["capabilities"]["window"]["showMessage"] = False
    second = server.request("initialize").result.result()
    assert second["capabilities"]["window"]["showMessage"] is True


def test_every_call_gets_a_fresh_id(server) -> None:
    ids = [server.request("initialize").id, server.request("unknown/method").id]
    server.notify("unknown/method")
    ids.append(server.request("initialize").id)
    assert ids == [1, 2, 4]


def test_unknown_method_is_tolerated_but_reported_unhandled(server) -> None:
    handle = server.request("workspace/symbol", {"query": "x"})
    assert handle.handled is False
    assert handle.result.result() is None


def test_strict_mode_raises_for_unknown_method(loop, sent) -> None:
    strict = NotifyServer(ServerConfig(strict_methods=True), loop, outbound=sent.append)
    with pytest.raises(UnknownMethod) as excinfo:
        strict.request("workspace/symbol")
    assert excinfo.value.code == -32601
    strict.request("initialize")


def test_exit_terminates_and_rejects_later_calls(server) -> None:
    calls = []
    server.create_receiver("textDocument/references", lambda params, respond: calls.append(params))

    handle = server.request("exit")
    assert handle.result.result() is None
    assert server.is_closing()
    assert server.state is SessionState.TERMINATED

    next_id = server.ids.peek()
    with pytest.raises(SessionTerminated):
        server.request("textDocument/references", {})
    with pytest.raises(SessionTerminated):
        server.notify("textDocument/references", {})
    with pytest.raises(SessionTerminated):
        server.request("initialize")
    assert calls == []
    assert server.ids.peek() == next_id


def test_exit_notification_terminates(server) -> None:
    server.notify("exit")
    assert server.is_closing()


def test_receivers_answer_through_respond(server) -> None:
    server.create_receiver("textDocument/definition", lambda params, respond: respond({"uri": params["uri"]}))
    handle = server.request("textDocument/definition", {"uri": "file:///a.py"})
    assert handle.handled is True
    assert handle.result.result() == {"uri": "file:///a.py"}


def test_first_answer_wins(server) -> None:
    server.create_receiver("m", lambda params, respond: respond("first"))
    server.create_receiver("m", lambda params, respond: "second")
    assert server.request("m").result.result() == "first"


def test_receiver_without_answer_resolves_empty(server) -> None:
    calls = []
    server.create_receiver("m", lambda params, respond: calls.append(params))
    handle = server.request("m")
    assert calls == [{}]
    assert handle.result.done()
    assert handle.result.result() is None


def test_receiver_error_fails_the_request(server) -> None:
    def _boom(params, respond) -> None:
        raise RuntimeError("index unavailable")

    server.create_receiver("m", _boom)
    handle = server.request("m")
    with pytest.raises(RuntimeError, match="index unavailable"):
        handle.result.result()


def test_respond_with_plain_error_value(server) -> None:
    server.create_receiver("m", lambda params, respond: respond(error="bad params"))
    handle = server.request("m")
    with pytest.raises(JsonRpcError, match="bad params"):
        handle.result.result()


def test_notify_invokes_receivers_without_answer(server) -> None:
    seen = []

    def _receiver(params, respond) -> None:
        seen.append(params)
        respond("ignored")

    server.create_receiver("textDocument/didSave", _receiver)
    assert server.notify("textDocument/didSave", {"uri": "x"}) is None
    assert seen == [{"uri": "x"}]


def test_notify_raises_receiver_failure_after_fan_out(server) -> None:
    calls = []

    def _boom(params, respond) -> None:
        raise RuntimeError("boom")

    server.create_receiver("m", _boom)
    server.create_receiver("m", lambda params, respond: calls.append("after"))
    with pytest.raises(RuntimeError, match="boom"):
        server.notify("m")
    assert calls == ["after"]
    assert not server.is_closing()


def test_acknowledgement_is_deferred_and_ordered(loop, server) -> None:
    acks = []
    first = server.request("initialize", on_ack=acks.append)
    second = server.request("unknown", on_ack=acks.append)
    third = server.request("exit", on_ack=acks.append)
    assert acks == []

    drain(loop)

    assert acks == [first.id, second.id, third.id]


def test_acknowledgement_follows_result(loop, server) -> None:
    events = []
    server.create_receiver("m", lambda params, respond: events.append("result") or respond(1))
    server.request("m", on_ack=lambda request_id: events.append(("ack", request_id)))
    events.append("returned")
    drain(loop)
    assert events == ["result", "returned", ("ack", 1)]
