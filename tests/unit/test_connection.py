"""Unit tests for CDPConnection with a scripted transport.

Tests id assignment, response matching across interleaved events, session
attachment, error payloads and anomaly handling without requiring real Chrome.
"""

import logging

import pytest

from chrome_devtools.connection import CDPConnection
from chrome_devtools.exceptions import (
    CommandFailedError,
    ConnectionClosedError,
    InvalidCommandError,
    ProtocolAnomalyError,
)


def attached_event(session_id):
    return {
        "method": "Target.attachedToTarget",
        "params": {
            "sessionId": session_id,
            "targetInfo": {"targetId": "T1", "type": "page"},
            "waitingForDebugger": False,
        },
    }


@pytest.mark.unit
class TestCommandIds:
    """Command ids start at 1 and grow by one per command."""

    def test_ids_strictly_increasing(self, fake_transport):
        conn = CDPConnection(fake_transport)

        conn.send_command("Page.enable")
        conn.send_command("Runtime.evaluate", {"expression": "1"})
        conn.send_command("Browser.close", needs_session=False)

        assert [c["id"] for c in fake_transport.sent] == [1, 2, 3]
        assert conn.next_command_id == 4

    def test_params_default_to_empty_dict(self, fake_transport):
        conn = CDPConnection(fake_transport)
        conn.send_command("Page.enable")

        assert fake_transport.sent[0] == {"id": 1, "method": "Page.enable", "params": {}}

    def test_invalid_method_not_sent(self, fake_transport):
        conn = CDPConnection(fake_transport)

        with pytest.raises(InvalidCommandError, match="Invalid CDP method name"):
            conn.send_command("navigate")

        assert fake_transport.sent == []
        assert conn.next_command_id == 1


@pytest.mark.unit
class TestResponseMatching:
    """send_command returns only the response carrying its own id."""

    def test_returns_result_payload(self, fake_transport):
        fake_transport.handlers["Runtime.evaluate"] = {"result": {"type": "number", "value": 2}}
        conn = CDPConnection(fake_transport)

        result = conn.send_command("Runtime.evaluate", {"expression": "1+1"})

        assert result == {"result": {"type": "number", "value": 2}}

    def test_missing_result_is_empty_dict(self, fake_transport):
        fake_transport.handlers["Page.enable"] = lambda c: [{"id": c["id"]}]
        conn = CDPConnection(fake_transport)

        assert conn.send_command("Page.enable") == {}

    def test_skips_events_and_other_ids(self, fake_transport):
        fake_transport.handlers["Runtime.evaluate"] = lambda c: [
            {"method": "Page.frameNavigated", "params": {}},
            {"id": c["id"] + 41, "result": {"wrong": True}},
            {"method": "Runtime.consoleAPICalled", "params": {"type": "log"}},
            {"id": c["id"], "result": {"right": True}},
            {"method": "Page.loadEventFired", "params": {"timestamp": 1.0}},
        ]
        conn = CDPConnection(fake_transport)

        result = conn.send_command("Runtime.evaluate", {"expression": "x"})

        assert result == {"right": True}
        # trailing event stays queued for whoever reads next
        assert len(fake_transport.inbox) == 1

    def test_unmatched_response_logged_and_dropped(self, fake_transport, caplog):
        caplog.set_level(logging.WARNING, logger="chrome_devtools")
        fake_transport.handlers["Page.enable"] = lambda c: [
            {"id": 999, "result": {}},
            {"id": c["id"], "result": {}},
        ]
        conn = CDPConnection(fake_transport)

        conn.send_command("Page.enable")

        assert "Unmatched CDP message" in caplog.text

    def test_malformed_message_dropped(self, fake_transport, caplog):
        caplog.set_level(logging.WARNING, logger="chrome_devtools")
        fake_transport.handlers["Page.enable"] = lambda c: [
            "not json{{",
            "[1, 2, 3]",
            {"id": c["id"], "result": {"ok": 1}},
        ]
        conn = CDPConnection(fake_transport)

        assert conn.send_command("Page.enable") == {"ok": 1}
        assert caplog.text.count("Malformed CDP message") == 2

    def test_strict_mode_raises_on_unmatched_response(self, fake_transport):
        fake_transport.handlers["Page.enable"] = lambda c: [
            {"id": 999, "result": {}},
            {"id": c["id"], "result": {}},
        ]
        conn = CDPConnection(fake_transport, strict=True)

        with pytest.raises(ProtocolAnomalyError) as exc_info:
            conn.send_command("Page.enable")
        assert '"id": 999' in exc_info.value.raw

    def test_strict_mode_raises_on_malformed_message(self, fake_transport):
        fake_transport.handlers["Page.enable"] = lambda c: ["garbage"]
        conn = CDPConnection(fake_transport, strict=True)

        with pytest.raises(ProtocolAnomalyError, match="Malformed"):
            conn.send_command("Page.enable")

    def test_strict_mode_still_allows_events(self, fake_transport):
        fake_transport.handlers["Page.enable"] = lambda c: [
            {"method": "Page.domContentEventFired", "params": {}},
            {"id": c["id"], "result": {}},
        ]
        conn = CDPConnection(fake_transport, strict=True)

        assert conn.send_command("Page.enable") == {}


@pytest.mark.unit
class TestSessionAttachment:
    """sessionId rides along on session-scoped commands once attached."""

    def test_no_session_before_attach(self, fake_transport):
        conn = CDPConnection(fake_transport)
        conn.send_command("Page.enable")

        assert "sessionId" not in fake_transport.sent[0]
        assert conn.session_id == ""

    def test_session_attached_after_event(self, fake_transport):
        fake_transport.handlers["Target.attachToTarget"] = lambda c: [
            attached_event("S1"),
            {"id": c["id"], "result": {"sessionId": "S1"}},
        ]
        conn = CDPConnection(fake_transport)

        conn.send_command("Target.attachToTarget", {"targetId": "T1", "flatten": True}, needs_session=False)
        conn.send_command("Page.enable")
        conn.send_command("Runtime.evaluate", {"expression": "1"})
        conn.send_command("Target.closeTarget", {"targetId": "T1"}, needs_session=False)

        attach, enable, evaluate, close = fake_transport.sent
        assert "sessionId" not in attach
        assert enable["sessionId"] == "S1"
        assert evaluate["sessionId"] == "S1"
        assert "sessionId" not in close
        assert conn.session_id == "S1"

    def test_later_attach_overwrites_session(self, fake_transport):
        conn = CDPConnection(fake_transport)
        fake_transport.push(attached_event("S1"))
        conn.send_command("Page.enable")
        fake_transport.push(attached_event("S2"))
        conn.send_command("Page.enable")
        conn.send_command("Page.enable")

        assert fake_transport.sent[1]["sessionId"] == "S1"
        assert fake_transport.sent[2]["sessionId"] == "S2"

    def test_observer_errors_do_not_break_dispatch(self, fake_transport, caplog):
        caplog.set_level(logging.ERROR, logger="chrome_devtools")
        conn = CDPConnection(fake_transport)

        def broken(event):
            raise RuntimeError("boom")

        conn.router.add_observer(broken)
        fake_transport.push(attached_event("S1"))

        assert conn.send_command("Page.enable") == {}
        assert conn.session_id == "S1"
        assert "Event observer error" in caplog.text


@pytest.mark.unit
class TestFailures:
    """Error payloads and transport failures surface as distinct exceptions."""

    def test_error_payload_raises_command_failed(self, fake_transport):
        fake_transport.handlers["Target.attachToTarget"] = lambda c: [
            {"id": c["id"], "error": {"code": -32602, "message": "No target with given id found"}}
        ]
        conn = CDPConnection(fake_transport)

        with pytest.raises(CommandFailedError, match="No target with given id") as exc_info:
            conn.send_command("Target.attachToTarget", {"targetId": "nope"}, needs_session=False)

        assert exc_info.value.method == "Target.attachToTarget"
        assert exc_info.value.error_code == -32602

    def test_send_failure_raises_connection_closed(self, fake_transport):
        conn = CDPConnection(fake_transport)
        fake_transport.close()

        with pytest.raises(ConnectionClosedError):
            conn.send_command("Page.enable")

    def test_receive_failure_raises_connection_closed(self, fake_transport):
        fake_transport.auto_respond = False
        conn = CDPConnection(fake_transport)

        with pytest.raises(ConnectionClosedError, match="Connection closed"):
            conn.send_command("Page.enable")

    def test_close_closes_transport(self, fake_transport):
        conn = CDPConnection(fake_transport)
        conn.close()

        assert fake_transport.closed


@pytest.mark.unit
def test_wire_traffic_logged_at_debug(fake_transport, caplog):
    caplog.set_level(logging.DEBUG, logger="chrome_devtools")
    conn = CDPConnection(fake_transport)

    conn.send_command("Page.enable")

    assert '>>> Sending: {"id": 1, "method": "Page.enable", "params": {}}' in caplog.text
    assert '<<< Received: {"id": 1, "result": {}}' in caplog.text
