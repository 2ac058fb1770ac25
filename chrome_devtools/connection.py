"""CDP command dispatch over a single blocking connection.

Provides CDPConnection: id assignment, session attachment, and matching each
command to its response while draining interleaved events.
"""

import logging
from typing import Any, Dict, Optional

from .exceptions import CommandFailedError, InvalidCommandError
from .protocol import Command, is_valid_method
from .router import MessageRouter
from .session import SessionTracker
from .transport import Transport

logger = logging.getLogger(__name__)


class CDPConnection:
    """Half-duplex CDP connection: one command in flight at a time.

    Handles:
    - Monotonic command ids starting at 1
    - Attaching the tracked sessionId to session-scoped commands
    - Waiting for the matching response, passing events to observers
    - Turning error payloads into CommandFailedError

    Not thread safe. A second blocking call issued while one is outstanding
    races on the shared inbound stream; callers must serialise access.

    Usage:
        conn = CDPConnection(WebSocketTransport.open(ws_url))
        result = conn.send_command("Runtime.evaluate", {"expression": "1+1"})
        conn.close()

    Attributes:
        router: Inbound message router (shared with the waiters)
        sessions: Tracker holding the current sessionId
        target_id: Currently attached target ("" until one is created)
    """

    def __init__(self, transport: Transport, *, strict: bool = False):
        """Initialize connection state.

        Args:
            transport: Open transport; owned by this connection from now on
            strict: Raise on protocol anomalies instead of logging them
        """
        self.router = MessageRouter(transport, strict=strict)
        self.sessions = SessionTracker()
        self.router.add_observer(self.sessions.observe)
        self.target_id: str = ""
        self._next_command_id: int = 1

    @property
    def session_id(self) -> str:
        return self.sessions.session_id

    @property
    def next_command_id(self) -> int:
        return self._next_command_id

    def send_command(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        needs_session: bool = True,
    ) -> dict:
        """Send a CDP command and block until its response arrives.

        Args:
            method: CDP method name (e.g., "Runtime.evaluate", "Page.enable")
            params: Method parameters (default: empty dict)
            needs_session: Attach the current sessionId. Target lifecycle and
                browser-level commands pass False.

        Returns:
            Command result dict (contents of "result" field in response)

        Raises:
            InvalidCommandError: If method is not Domain.method shaped
            ConnectionClosedError: If sending or receiving fails
            CommandFailedError: If Chrome returns an error response
            ProtocolAnomalyError: On an unexpected message in strict mode
        """
        if not is_valid_method(method):
            raise InvalidCommandError(
                f"Invalid CDP method name: {method!r}", method=method
            )

        cmd_id = self._next_command_id
        self._next_command_id += 1

        session_id = self.session_id if needs_session else None
        command = Command(cmd_id, method, params or {}, session_id or None)
        self.router.send(command)

        response = self.router.receive_until(
            lambda message: message.get("id") == cmd_id,
            waiting_for=f"response to {method} (id={cmd_id})",
        )

        if "error" in response:
            error = response["error"]
            if not isinstance(error, dict):
                error = {"message": str(error)}
            logger.debug(f"Command {cmd_id} {method} failed: {error}")
            raise CommandFailedError(
                error.get("message", "Unknown CDP error"),
                method=method,
                error_code=error.get("code"),
                details={"error": error},
            )
        return response.get("result", {})

    def close(self) -> None:
        """Close the underlying transport."""
        self.router.transport.close()
