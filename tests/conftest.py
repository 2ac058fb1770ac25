"""Shared fixtures: a scripted stand-in for the browser's WebSocket."""

import json
import time
from collections import deque

import pytest

from chrome_devtools.devtools import ChromeDevTools
from chrome_devtools.exceptions import ConnectionClosedError

BROWSER_WS_URL = "ws://127.0.0.1:9222/devtools/browser/abc"


class FakeTransport:
    """Transport that answers commands from a script.

    handlers maps a CDP method to either a result dict (answered as
    {"id": <id>, "result": ...}) or a callable taking the decoded command
    and returning the list of messages to queue. Unlisted methods get an
    empty result. Messages can also be queued directly with push().

    When the inbox runs dry, receive() raises ConnectionClosedError (or the
    builtin TimeoutError if a timeout was given) instead of blocking.
    """

    def __init__(self):
        self.handlers = {}
        self.auto_respond = True
        self.inbox = deque()
        self.sent = []
        self.sent_at = []
        self.closed = False
        self.close_calls = 0

    def push(self, *messages):
        for message in messages:
            self.inbox.append(message if isinstance(message, str) else json.dumps(message))

    def send(self, text):
        if self.closed:
            raise ConnectionClosedError("Send failed: transport closed")
        command = json.loads(text)
        self.sent.append(command)
        self.sent_at.append(time.monotonic())
        if self.auto_respond:
            self.push(*self._respond(command))

    def receive(self, timeout=None):
        if self.inbox:
            return self.inbox.popleft()
        if timeout is not None:
            raise TimeoutError()
        raise ConnectionClosedError("Connection closed: no more scripted messages")

    def close(self):
        self.closed = True
        self.close_calls += 1

    def methods(self):
        return [command["method"] for command in self.sent]

    def sent_for(self, method):
        return [command for command in self.sent if command["method"] == method]

    def _respond(self, command):
        handler = self.handlers.get(command["method"])
        if handler is None:
            return [{"id": command["id"], "result": {}}]
        if callable(handler):
            return handler(command)
        return [{"id": command["id"], "result": handler}]


def make_evaluate_handler(*values):
    """Runtime.evaluate handler returning values in order, repeating the last."""
    remaining = list(values)

    def handler(command):
        value = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return [{"id": command["id"], "result": {"result": {"type": "object", "value": value}}}]

    return handler


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def evaluate_results():
    return make_evaluate_handler


@pytest.fixture
def devtools(fake_transport):
    return ChromeDevTools(BROWSER_WS_URL, transport=fake_transport)
