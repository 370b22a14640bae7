"""Connectivity status indicator.

The indicator tracks connectivity only. Whether a request is in flight is a
separate axis owned by the engine's ``ConversationState``.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from .models import CONNECTED, CONNECTING, CONNECTION_ERROR, ConnectionStatus

if TYPE_CHECKING:
    from .presenter import Presenter

logger = logging.getLogger(__name__)

# --- Events ---
START = "start"
STARTUP_ELAPSED = "startup_elapsed"
TRANSPORT_FAILED = "transport_failed"
TRANSPORT_SUCCEEDED = "transport_succeeded"

LABELS: Dict[str, str] = {
    CONNECTING: "Connecting...",
    CONNECTED: "Ready",
    CONNECTION_ERROR: "Connection error",
}

# (current status, event) -> next status. None stands for "not started yet".
TRANSITIONS: Dict[Tuple[Optional[str], str], ConnectionStatus] = {
    (None, START): CONNECTING,
    (CONNECTING, STARTUP_ELAPSED): CONNECTED,
    (CONNECTING, TRANSPORT_FAILED): CONNECTION_ERROR,
    (CONNECTED, TRANSPORT_FAILED): CONNECTION_ERROR,
    (CONNECTION_ERROR, TRANSPORT_SUCCEEDED): CONNECTED,
}


class StatusIndicator:
    """Small state machine mirrored onto the presenter's connection display."""

    def __init__(
        self, presenter: Optional["Presenter"] = None, startup_delay: float = 1.5
    ):
        self.presenter = presenter
        self.startup_delay = startup_delay
        self._status: Optional[ConnectionStatus] = None

    @property
    def status(self) -> Optional[ConnectionStatus]:
        return self._status

    def handle(self, event: str) -> bool:
        """Applies ``event``; returns True when the status changed.

        Events with no entry in the transition table for the current status
        are ignored.
        """
        target = TRANSITIONS.get((self._status, event))
        if target is None:
            logger.debug("Ignoring status event %r while %s", event, self._status)
            return False

        logger.debug("Connection status %s -> %s (%s)", self._status, target, event)
        self._status = target
        if self.presenter is not None:
            self.presenter.set_connection_status(target, LABELS[target])
        return True

    async def start(self) -> None:
        """Enters ``connecting`` and reports ``connected`` once the startup delay elapses."""
        self.handle(START)
        await asyncio.sleep(self.startup_delay)
        self.handle(STARTUP_ELAPSED)
