"""
Stall detection for in-flight model streams.

The monitor runs a timer on the event loop next to the stream consumer.
Every received chunk calls ``update_activity``, which re-arms the timer.
If the timer fires first the stream is considered stalled: the state moves
to STALLED and ``on_timeout`` runs once. The monitor never blocks or
cancels the stream itself; retry policy belongs to the caller, which can
check ``should_retry``.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from config.defaults import STREAM_MAX_RETRIES, STREAM_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    IDLE = "idle"
    MONITORING = "monitoring"
    ACTIVE = "active"
    STALLED = "stalled"
    STOPPED = "stopped"


@dataclass
class MonitorStatus:
    state: MonitorState
    retry_count: int
    last_activity: float
    time_since_last_activity: float


class StreamRecoveryMonitor:
    """
    Watches a stream for silence longer than ``timeout`` seconds.

    State machine: idle -> monitoring (start) -> active (activity) ->
    stalled (timeout) -> stopped (stop, from any state).
    """

    def __init__(
        self,
        timeout: float = STREAM_TIMEOUT_SECONDS,
        max_retries: int = STREAM_MAX_RETRIES,
        on_timeout: Callable[[], None] | None = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self._on_timeout = on_timeout
        self._state = MonitorState.IDLE
        self._retry_count = 0
        self._last_activity = time.monotonic()
        self._handle: asyncio.TimerHandle | None = None

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def retry_count(self) -> int:
        """Number of stalls detected so far."""
        return self._retry_count

    @property
    def should_retry(self) -> bool:
        """True while detected stalls remain within the retry ceiling."""
        return self._retry_count <= self.max_retries

    def start_monitoring(self) -> None:
        """Begin watching. Must be called from a running event loop."""
        if self._state is MonitorState.STOPPED:
            return
        self._state = MonitorState.MONITORING
        self._last_activity = time.monotonic()
        self._arm()

    def update_activity(self) -> None:
        """Record that data arrived; resets the inactivity clock."""
        if self._state in (MonitorState.IDLE, MonitorState.STOPPED):
            return
        self._state = MonitorState.ACTIVE
        self._last_activity = time.monotonic()
        self._arm()

    def stop(self) -> None:
        """Stop watching and release the pending timer."""
        self._cancel()
        self._state = MonitorState.STOPPED

    def status(self) -> MonitorStatus:
        return MonitorStatus(
            state=self._state,
            retry_count=self._retry_count,
            last_activity=self._last_activity,
            time_since_last_activity=time.monotonic() - self._last_activity,
        )

    def _arm(self) -> None:
        self._cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout, self._handle_timeout)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _handle_timeout(self) -> None:
        self._handle = None
        if self._state not in (MonitorState.MONITORING, MonitorState.ACTIVE):
            return

        self._state = MonitorState.STALLED
        self._retry_count += 1
        logger.warning(
            "Stream timeout detected after %.1fs of inactivity (stall %d/%d)",
            time.monotonic() - self._last_activity,
            self._retry_count,
            self.max_retries,
        )
        if not self.should_retry:
            logger.error("Max retries reached for stream recovery")

        if self._on_timeout is not None:
            try:
                self._on_timeout()
            except Exception:
                logger.exception("Stream timeout callback failed")
