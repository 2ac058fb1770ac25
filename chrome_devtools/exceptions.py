"""Exception hierarchy for DevTools client operations.

All client errors inherit from CDPError so callers can catch one type, while
still telling "the browser is unreachable" apart from "the condition never
became true".
"""

from typing import Optional


class CDPError(Exception):
    """Base exception for all CDP-related errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class CDPConnectionError(CDPError):
    """Transport-level failures.

    Never retried; raised immediately and aborts whatever receive loop was
    in progress.
    """

    pass


class ConnectionFailedError(CDPConnectionError):
    """WebSocket connection could not be opened.

    Common causes: wrong port, Chrome not running with
    --remote-debugging-port, stale browser WebSocket URL.
    """

    pass


class ConnectionClosedError(CDPConnectionError):
    """Send or receive failed on an open connection.

    Common causes: Chrome crash or Browser.close, network interruption,
    using the client after close().
    """

    pass


class CDPCommandError(CDPError):
    """Command execution failures."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        error_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.method = method
        self.error_code = error_code


class CommandFailedError(CDPCommandError):
    """Response carried an error payload instead of a result.

    Example: Target.attachToTarget with an unknown targetId.
    """

    pass


class InvalidCommandError(CDPCommandError):
    """Command rejected before it was sent.

    Example: method name that is not Domain.method shaped.
    """

    pass


class CDPTimeoutError(CDPError):
    """A blocking wait did not complete before its deadline."""

    def __init__(
        self,
        message: str,
        command_method: Optional[str] = None,
        timeout: Optional[float] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.command_method = command_method
        self.timeout = timeout

    def __str__(self):
        if self.command_method and self.timeout:
            return f"Waiting for '{self.command_method}' timed out after {self.timeout}s"
        return self.message


class WaitTimeoutError(CDPTimeoutError):
    """Selector never appeared before the polling deadline.

    Attributes:
        selector: CSS selector that was polled
        elapsed_ms: Wall-clock milliseconds spent polling
        timeout_ms: Configured deadline in milliseconds
    """

    def __init__(
        self,
        message: str,
        selector: str,
        elapsed_ms: float,
        timeout_ms: int,
        details: Optional[dict] = None,
    ):
        super().__init__(message, timeout=timeout_ms / 1000, details=details)
        self.selector = selector
        self.elapsed_ms = elapsed_ms
        self.timeout_ms = timeout_ms

    def __str__(self):
        return (
            f"Timeout waiting for selector: {self.selector} "
            f"after {self.elapsed_ms:.0f}ms (timeout: {self.timeout_ms}ms)"
        )


class CDPTargetNotFoundError(CDPError):
    """Target lifecycle failures.

    Raised when Target.createTarget does not yield a usable target.
    """

    def __init__(
        self,
        message: str,
        target_id: Optional[str] = None,
        url_pattern: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.target_id = target_id
        self.url_pattern = url_pattern

    def __str__(self):
        if self.target_id:
            return f"Target not found: {self.target_id}"
        if self.url_pattern:
            return f"No target created for URL: {self.url_pattern}"
        return self.message


class ProtocolAnomalyError(CDPError):
    """Inbound message that fits no pending command or event.

    Only raised in strict mode; the lenient default logs and drops it.

    Attributes:
        raw: The offending message text
    """

    def __init__(self, message: str, raw: str, details: Optional[dict] = None):
        super().__init__(message, details)
        self.raw = raw
