"""High-level page automation over a browser-level CDP connection.

ChromeDevTools opens a tab, attaches to it with a flattened session and
drives it: navigate, evaluate, click, type, wait. Every operation is a
blocking composition of CDPConnection.send_command and the waiters.
"""

import json
import logging
import time
from typing import Any, Optional

from .config import Configuration
from .connection import CDPConnection
from .exceptions import CDPTargetNotFoundError, ConnectionClosedError
from .transport import Transport, WebSocketTransport
from .waiters import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_SELECTOR_TIMEOUT_MS,
    LOAD_EVENT_FIRED,
    wait_for_event,
    wait_for_selector,
)

logger = logging.getLogger(__name__)

NO_TITLE = "(no title)"
DEFAULT_TYPING_DELAY_MS = 70
ENTER_KEY_CODE = 13


class ChromeDevTools:
    """Automation client for one browser tab.

    Usage:
        with ChromeDevTools("ws://127.0.0.1:9222/devtools/browser") as devtools:
            devtools.create_target("about:blank")
            devtools.navigate("https://example.com")
            devtools.wait_selector("h1", timeout_ms=5000)
            print(devtools.get_title())
            devtools.close_page()

    Only one call may be in progress at a time; the instance is not thread safe.

    Attributes:
        ws_url: Browser WebSocket debugger URL
        timeout: WebSocket connect timeout in seconds
        max_size: Maximum WebSocket message size in bytes
        load_timeout: Default seconds for navigate/wait_loading (None = forever)
        strict: Raise on protocol anomalies instead of logging them
        connection: Active CDPConnection (None until connect())
    """

    def __init__(
        self,
        ws_url: str,
        *,
        timeout: float = 15.0,
        max_size: int = 2_097_152,
        load_timeout: Optional[float] = None,
        strict: bool = False,
        transport: Optional[Transport] = None,
    ):
        """Initialize client; no I/O unless a transport is supplied.

        Args:
            ws_url: WebSocket debugger URL (e.g., ws://127.0.0.1:9222/devtools/browser/<id>)
            timeout: Connect timeout in seconds
            max_size: Maximum WebSocket message size in bytes
            load_timeout: Default load-wait timeout in seconds
            strict: Strict protocol anomaly handling
            transport: Already-open transport to use instead of connecting

        Raises:
            ValueError: If ws_url is not a ws:// or wss:// URL
        """
        if not ws_url.startswith(("ws://", "wss://")):
            raise ValueError(f"Invalid WebSocket URL: {ws_url}")

        self.ws_url = ws_url
        self.timeout = timeout
        self.max_size = max_size
        self.load_timeout = load_timeout
        self.strict = strict

        self.connection: Optional[CDPConnection] = None
        if transport is not None:
            self.connection = CDPConnection(transport, strict=strict)

    @classmethod
    def from_config(
        cls, config: Configuration, *, transport: Optional[Transport] = None
    ) -> "ChromeDevTools":
        return cls(
            config.websocket_url,
            timeout=config.timeout,
            max_size=config.max_size,
            load_timeout=config.load_timeout,
            strict=config.strict_protocol,
            transport=transport,
        )

    def connect(self) -> "ChromeDevTools":
        """Open the WebSocket connection if not already open.

        Raises:
            ConnectionFailedError: If the connection cannot be established
        """
        if self.connection is None:
            transport = WebSocketTransport.open(
                self.ws_url, timeout=self.timeout, max_size=self.max_size
            )
            self.connection = CDPConnection(transport, strict=self.strict)
        return self

    def __enter__(self) -> "ChromeDevTools":
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def target_id(self) -> str:
        return self._connection.target_id

    @property
    def session_id(self) -> str:
        return self._connection.session_id

    @property
    def _connection(self) -> CDPConnection:
        if self.connection is None:
            raise ConnectionClosedError(
                "Not connected: call connect() first",
                details={"url": self.ws_url},
            )
        return self.connection

    def send_command(
        self, method: str, params: Optional[dict] = None, *, needs_session: bool = True
    ) -> dict:
        """Send a raw CDP command (see CDPConnection.send_command)."""
        return self._connection.send_command(
            method, params, needs_session=needs_session
        )

    # Target lifecycle

    def create_target(self, url: str) -> str:
        """Open a new tab at url, attach to it and enable Page events.

        Returns:
            The new target id

        Raises:
            CDPTargetNotFoundError: If Target.createTarget returned no targetId
            CommandFailedError: If any of the three commands is rejected
        """
        conn = self._connection
        result = conn.send_command(
            "Target.createTarget", {"url": url}, needs_session=False
        )
        target_id = result.get("targetId")
        if not target_id:
            raise CDPTargetNotFoundError(
                "Target.createTarget returned no targetId",
                url_pattern=url,
                details={"result": result},
            )
        conn.target_id = target_id
        logger.info(f"Created target {target_id} at {url}")

        # flatten=true makes Chrome announce the session via Target.attachedToTarget
        conn.send_command(
            "Target.attachToTarget",
            {"targetId": target_id, "flatten": True},
            needs_session=False,
        )
        conn.send_command("Page.enable")
        return target_id

    def close_page(self) -> None:
        """Close the recorded target; target and session ids are kept."""
        self._connection.send_command(
            "Target.closeTarget", {"targetId": self.target_id}, needs_session=False
        )

    def close_browser(self) -> None:
        """Terminate the whole browser process."""
        self._connection.send_command("Browser.close", {}, needs_session=False)

    def close(self) -> None:
        """Close the WebSocket connection. A later connect() opens a new one."""
        if self.connection is not None:
            self.connection.close()
            self.connection = None

    # Navigation and waits

    def navigate(self, url: str, *, timeout: Optional[float] = None) -> None:
        """Navigate the attached page and block until Page.loadEventFired.

        Args:
            url: Destination URL
            timeout: Seconds to wait for the load event (default: load_timeout)

        Raises:
            CDPTimeoutError: If a timeout applies and the page never loads
            ConnectionClosedError: If the connection fails while waiting
        """
        result = self._connection.send_command("Page.navigate", {"url": url})
        if result.get("errorText"):
            logger.warning(f"Navigation to {url} reported: {result['errorText']}")
        self.wait_loading(timeout=timeout)

    def wait_loading(self, *, timeout: Optional[float] = None) -> None:
        """Block until the next Page.loadEventFired."""
        wait_for_event(
            self._connection,
            LOAD_EVENT_FIRED,
            timeout=timeout if timeout is not None else self.load_timeout,
        )

    def wait_selector(
        self,
        selector: str,
        timeout_ms: int = DEFAULT_SELECTOR_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ) -> bool:
        """Poll until selector matches an element.

        Raises:
            WaitTimeoutError: If nothing matched within timeout_ms
        """
        return wait_for_selector(
            self.evaluate, selector, timeout_ms, poll_interval_ms
        )

    # Page actions

    def evaluate(self, expression: str, return_by_value: bool = True) -> Any:
        """Evaluate JavaScript in the page.

        Returns:
            result.value from Runtime.evaluate, or None when absent
        """
        result = self._connection.send_command(
            "Runtime.evaluate",
            {"expression": expression, "returnByValue": return_by_value},
        )
        remote_object = result.get("result") or {}
        return remote_object.get("value")

    def get_title(self) -> str:
        return self.evaluate("document.title") or NO_TITLE

    def get_url(self) -> Optional[str]:
        return self.evaluate("window.location.href")

    def click_selector(self, selector: str) -> None:
        """Click the first element matching selector; no-op if none."""
        self.evaluate(f"document.querySelector({json.dumps(selector)})?.click()")

    def type_into_selector(self, selector: str, text: str) -> None:
        """Set an input's value and fire a bubbling input event."""
        script = (
            "(() => { "
            f"const el = document.querySelector({json.dumps(selector)}); "
            f"if (el) {{ el.value = {json.dumps(text)}; "
            "el.dispatchEvent(new Event('input', { bubbles: true })); } "
            "})()"
        )
        self.evaluate(script)

    def type_text(self, text: str, delay_ms: int = DEFAULT_TYPING_DELAY_MS) -> None:
        """Type into the focused element one character at a time.

        Each code point is its own Input.insertText, followed by a pause of
        delay_ms, so pages see keystroke-level input.
        """
        for char in text:
            self._connection.send_command("Input.insertText", {"text": char})
            time.sleep(delay_ms / 1000)

    def press_enter(self) -> None:
        for event_type in ("keyDown", "keyUp"):
            self._connection.send_command(
                "Input.dispatchKeyEvent",
                {
                    "type": event_type,
                    "key": "Enter",
                    "code": "Enter",
                    "windowsVirtualKeyCode": ENTER_KEY_CODE,
                    "nativeVirtualKeyCode": ENTER_KEY_CODE,
                },
            )

    def find_by_selector(self, selector: str) -> Optional[str]:
        """Return the first matching element's outerHTML, or None."""
        script = (
            "(() => { "
            f"const el = document.querySelector({json.dumps(selector)}); "
            "return el ? el.outerHTML : null; "
            "})()"
        )
        result = self.evaluate(script)
        return str(result) if result is not None else None
