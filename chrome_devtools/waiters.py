"""Blocking waits layered on the connection's inbound stream.

Two kinds:
- wait_for_event: drain messages until a named event arrives (load-wait)
- wait_for_selector: poll an existence check via Runtime.evaluate until it
  holds or the deadline passes
"""

import json
import logging
import time
from typing import Any, Callable, Optional

from .connection import CDPConnection
from .exceptions import WaitTimeoutError
from .logging_setup import log_with_context

logger = logging.getLogger(__name__)

LOAD_EVENT_FIRED = "Page.loadEventFired"

DEFAULT_SELECTOR_TIMEOUT_MS = 30000
DEFAULT_POLL_INTERVAL_MS = 100


def wait_for_event(
    connection: CDPConnection,
    event_name: str = LOAD_EVENT_FIRED,
    *,
    timeout: Optional[float] = None,
) -> dict:
    """Block until an event named event_name is received.

    Every other event is drained (observers still see it). A response that
    arrives here has no pending command and is treated as an anomaly, so
    only call this while no command is outstanding.

    Args:
        connection: Connection whose stream is consumed
        event_name: CDP event to wait for
        timeout: Seconds to wait (None = until the event or a connection failure)

    Returns:
        The event's params dict

    Raises:
        ConnectionClosedError: If the connection fails while waiting
        CDPTimeoutError: If timeout is set and elapses first
    """
    logger.debug(f"Waiting for {event_name}")
    event = connection.router.receive_until(
        lambda message: message.get("method") == event_name,
        timeout=timeout,
        waiting_for=event_name,
    )
    return event.get("params", {})


def selector_exists_script(selector: str) -> str:
    return f"!!document.querySelector({json.dumps(selector)})"


def wait_for_selector(
    evaluate: Callable[[str], Any],
    selector: str,
    timeout_ms: int = DEFAULT_SELECTOR_TIMEOUT_MS,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
) -> bool:
    """Poll until document.querySelector(selector) finds an element.

    There is no "element appeared" event to subscribe to, so existence is
    checked with one Runtime.evaluate per poll. The sleep between polls is
    capped at the time left, so the timeout fires at most one evaluation
    after the deadline.

    Args:
        evaluate: Function running a JS expression and returning its value
        selector: CSS selector
        timeout_ms: Deadline in milliseconds
        poll_interval_ms: Pause between checks in milliseconds

    Returns:
        True once the element exists

    Raises:
        WaitTimeoutError: If the element did not appear in time
        ConnectionClosedError: If the connection fails while polling
    """
    started = time.monotonic()
    script = selector_exists_script(selector)
    logger.info(f"Waiting for selector: {selector} (timeout: {timeout_ms}ms)")

    while True:
        exists = evaluate(script)
        elapsed_ms = (time.monotonic() - started) * 1000

        if exists:
            log_with_context(
                logger,
                logging.INFO,
                f"Selector found after {elapsed_ms:.0f}ms",
                selector=selector,
                elapsed_ms=round(elapsed_ms),
            )
            return True

        if elapsed_ms >= timeout_ms:
            logger.warning(f"Timeout waiting for selector: {selector}")
            raise WaitTimeoutError(
                f"Timeout waiting for selector: {selector}",
                selector=selector,
                elapsed_ms=elapsed_ms,
                timeout_ms=timeout_ms,
            )

        remaining_ms = timeout_ms - elapsed_ms
        time.sleep(min(poll_interval_ms, remaining_ms) / 1000)
