"""
Session tracking for attached targets.

With flatten=true, Target.attachToTarget answers through a
Target.attachedToTarget event whose sessionId must ride along on every
later page-level command.
"""

import logging

logger = logging.getLogger(__name__)

ATTACHED_TO_TARGET = "Target.attachedToTarget"


class SessionTracker:
    """
    Router observer that remembers the most recent attached session.

    Usage:
        tracker = SessionTracker()
        router.add_observer(tracker.observe)
        ...
        tracker.session_id  # "" until Target.attachedToTarget arrives

    Attributes:
        session_id: Current session identifier ("" until attached)
    """

    def __init__(self):
        self.session_id: str = ""

    def observe(self, event: dict) -> None:
        """
        Inspect an event pulled off the wire; never raises.

        Only Target.attachedToTarget with params.sessionId changes state. A
        later attachment overwrites the earlier one; closing a target does
        not reset it.
        """
        if event.get("method") != ATTACHED_TO_TARGET:
            return
        params = event.get("params")
        if not isinstance(params, dict):
            return
        session_id = params.get("sessionId")
        if not session_id:
            return

        self.session_id = session_id
        logger.info(f"Updated sessionId: {session_id}")
