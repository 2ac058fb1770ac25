"""Blocking WebSocket transport for CDP messages.

The connection layer only needs something with send/receive/close; the
WebSocketTransport below is the production implementation, tests substitute
a scripted fake.
"""

import logging
from typing import Optional, Protocol

try:
    from websockets.sync.client import connect as ws_connect
    from websockets.exceptions import ConnectionClosed, WebSocketException
except ImportError:
    raise ImportError(
        "websockets library not found. Install with: pip3 install websockets"
    )

from .exceptions import ConnectionFailedError, ConnectionClosedError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Duplex, message-framed, ordered channel.

    receive() blocks until a message arrives. With a timeout it raises the
    builtin TimeoutError when nothing arrived in time. Connection failures
    surface as ConnectionClosedError.
    """

    def send(self, text: str) -> None: ...

    def receive(self, timeout: Optional[float] = None) -> str: ...

    def close(self) -> None: ...


class WebSocketTransport:
    """Transport over a synchronous websockets client connection.

    Usage:
        transport = WebSocketTransport.open("ws://127.0.0.1:9222/devtools/browser")
        transport.send('{"id": 1, "method": "Browser.getVersion", "params": {}}')
        print(transport.receive())
        transport.close()

    Attributes:
        ws_url: WebSocket debugger URL
        timeout: Opening handshake timeout in seconds
        max_size: Maximum inbound message size in bytes (large DOMs need room)
    """

    def __init__(self, ws, ws_url: str, timeout: float, max_size: int):
        self._ws = ws
        self.ws_url = ws_url
        self.timeout = timeout
        self.max_size = max_size

    @classmethod
    def open(
        cls,
        ws_url: str,
        *,
        timeout: float = 15.0,
        max_size: int = 2_097_152,
    ) -> "WebSocketTransport":
        """Open the WebSocket connection.

        Raises:
            ConnectionFailedError: If the handshake fails or times out
        """
        logger.info(f"Connecting to {ws_url}")
        try:
            ws = ws_connect(ws_url, open_timeout=timeout, max_size=max_size)
        except (OSError, TimeoutError, WebSocketException) as e:
            raise ConnectionFailedError(
                f"Failed to connect to {ws_url}: {e}",
                details={"url": ws_url, "error": str(e)},
            ) from e
        logger.info("CDP connection established")
        return cls(ws, ws_url, timeout, max_size)

    def send(self, text: str) -> None:
        try:
            self._ws.send(text)
        except (ConnectionClosed, OSError) as e:
            raise ConnectionClosedError(
                f"Send failed: {e}", details={"url": self.ws_url}
            ) from e

    def receive(self, timeout: Optional[float] = None) -> str:
        try:
            message = self._ws.recv(timeout=timeout)
        except TimeoutError:
            raise
        except ConnectionClosed as e:
            raise ConnectionClosedError(
                f"Connection closed: {e}", details={"url": self.ws_url}
            ) from e
        except OSError as e:
            raise ConnectionClosedError(
                f"Receive failed: {e}", details={"url": self.ws_url}
            ) from e
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")
        return message

    def close(self) -> None:
        logger.info("Disconnecting CDP connection")
        self._ws.close()
        logger.info("CDP connection closed")
