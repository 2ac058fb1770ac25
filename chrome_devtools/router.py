"""Single consumer of the inbound CDP message stream.

Every blocking call (command dispatch, load-wait) goes through
MessageRouter.receive_until, so matching "response for id X" and "event of
kind Y" lives in one loop instead of one loop per call site.
"""

import logging
import time
from typing import Callable, List, Optional

from .exceptions import CDPTimeoutError, ProtocolAnomalyError
from .protocol import Command, is_event, parse_message
from .transport import Transport

logger = logging.getLogger(__name__)

EventObserver = Callable[[dict], None]
MessagePredicate = Callable[[dict], bool]


class MessageRouter:
    """Routes inbound messages for one connection.

    Events are offered to every registered observer before the caller's
    predicate is checked. Messages that are neither the awaited one nor an
    event are anomalies: logged and dropped, or raised in strict mode.

    There is no background reader; only one receive_until may run at a time.

    Attributes:
        transport: Underlying message channel
        strict: Raise ProtocolAnomalyError instead of dropping anomalies
    """

    def __init__(self, transport: Transport, *, strict: bool = False):
        self.transport = transport
        self.strict = strict
        self._observers: List[EventObserver] = []

    def add_observer(self, observer: EventObserver) -> None:
        self._observers.append(observer)

    def send(self, command: Command) -> None:
        """Serialise and send a command.

        Raises:
            ConnectionClosedError: If the transport send fails
        """
        text = command.to_json()
        logger.debug(f">>> Sending: {text}")
        self.transport.send(text)

    def receive_until(
        self,
        predicate: MessagePredicate,
        *,
        timeout: Optional[float] = None,
        waiting_for: str = "message",
    ) -> dict:
        """Consume messages until one satisfies predicate.

        Args:
            predicate: Called with each decoded message
            timeout: Seconds before giving up (None = block indefinitely)
            waiting_for: Label used in logs and timeout errors

        Returns:
            The first message for which predicate returned True

        Raises:
            ConnectionClosedError: If the transport fails while receiving
            CDPTimeoutError: If timeout elapses first
            ProtocolAnomalyError: On an unexpected message in strict mode
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise CDPTimeoutError(
                        f"Timed out waiting for {waiting_for}",
                        command_method=waiting_for,
                        timeout=timeout,
                    )

            try:
                raw = self.transport.receive(timeout=remaining)
            except TimeoutError:
                raise CDPTimeoutError(
                    f"Timed out waiting for {waiting_for}",
                    command_method=waiting_for,
                    timeout=timeout,
                )
            logger.debug(f"<<< Received: {raw}")

            message = parse_message(raw)
            if message is None:
                self._anomaly("Malformed CDP message", raw)
                continue

            if is_event(message):
                self._dispatch(message)

            if predicate(message):
                return message

            if not is_event(message):
                self._anomaly(f"Unmatched CDP message while waiting for {waiting_for}", raw)

    def _dispatch(self, event: dict) -> None:
        for observer in self._observers:
            try:
                observer(event)
            except Exception as e:
                logger.error(
                    f"Event observer error for {event.get('method')}: {e}",
                    exc_info=True,
                )

    def _anomaly(self, reason: str, raw: str) -> None:
        if self.strict:
            raise ProtocolAnomalyError(reason, raw=raw)
        logger.warning(f"{reason}, dropped: {raw[:200]}")
