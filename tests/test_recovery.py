"""
Tests for stall detection on model streams.
"""
import asyncio
import time

from core.recovery import MonitorState, StreamRecoveryMonitor

TIMEOUT = 0.05


class TestMonitorStates:
    """Test the monitor state machine."""

    async def test_initial_state(self):
        """Test that a new monitor is idle."""
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT)

        assert monitor.state is MonitorState.IDLE
        assert monitor.retry_count == 0

    async def test_start_and_activity(self):
        """Test monitoring and active transitions."""
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT)

        monitor.start_monitoring()
        assert monitor.state is MonitorState.MONITORING

        monitor.update_activity()
        assert monitor.state is MonitorState.ACTIVE
        monitor.stop()

    async def test_activity_before_start_is_ignored(self):
        """Test that activity does not start an idle monitor."""
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT)

        monitor.update_activity()

        assert monitor.state is MonitorState.IDLE

    async def test_stop_from_any_state(self):
        """Test that stop always ends in stopped and cancels the timer."""
        fired = []
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT, on_timeout=lambda: fired.append(1))
        monitor.start_monitoring()

        monitor.stop()
        await asyncio.sleep(TIMEOUT * 3)

        assert monitor.state is MonitorState.STOPPED
        assert fired == []

    async def test_no_restart_after_stop(self):
        """Test that a stopped monitor stays stopped."""
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT)
        monitor.stop()

        monitor.start_monitoring()

        assert monitor.state is MonitorState.STOPPED


class TestStallDetection:
    """Test timeout detection."""

    async def test_stall_fires_once(self):
        """Test that a silent stream stalls and the callback runs exactly once."""
        fired = []
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT, on_timeout=lambda: fired.append(time.monotonic()))
        monitor.start_monitoring()
        started = time.monotonic()

        await asyncio.sleep(TIMEOUT * 5)

        assert monitor.state is MonitorState.STALLED
        assert len(fired) == 1
        assert fired[0] - started >= TIMEOUT * 0.9
        assert fired[0] - started < TIMEOUT * 3
        assert monitor.retry_count == 1
        monitor.stop()

    async def test_activity_resets_clock(self):
        """Test that steady activity keeps the stream from stalling."""
        fired = []
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT * 4, on_timeout=lambda: fired.append(1))
        monitor.start_monitoring()

        for _ in range(6):
            await asyncio.sleep(TIMEOUT)
            monitor.update_activity()

        assert fired == []
        assert monitor.state is MonitorState.ACTIVE
        monitor.stop()

    async def test_stall_after_activity_stops(self):
        """Test that a stall is detected after the last activity update."""
        fired = []
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT, on_timeout=lambda: fired.append(1))
        monitor.start_monitoring()
        monitor.update_activity()

        await asyncio.sleep(TIMEOUT * 4)

        assert fired == [1]
        status = monitor.status()
        assert status.state is MonitorState.STALLED
        assert status.time_since_last_activity >= TIMEOUT * 0.9
        monitor.stop()

    async def test_activity_after_stall_rearms(self):
        """Test that a stream resuming after a stall can stall again."""
        fired = []
        monitor = StreamRecoveryMonitor(timeout=TIMEOUT, max_retries=1, on_timeout=lambda: fired.append(1))
        monitor.start_monitoring()
        await asyncio.sleep(TIMEOUT * 3)
        assert monitor.should_retry

        monitor.update_activity()
        await asyncio.sleep(TIMEOUT * 3)

        assert fired == [1, 1]
        assert monitor.retry_count == 2
        assert not monitor.should_retry
        monitor.stop()

    async def test_callback_errors_are_contained(self):
        """Test that a failing callback does not break the event loop."""

        def explode():
            raise RuntimeError("boom")

        monitor = StreamRecoveryMonitor(timeout=TIMEOUT, on_timeout=explode)
        monitor.start_monitoring()

        await asyncio.sleep(TIMEOUT * 3)

        assert monitor.state is MonitorState.STALLED
        monitor.stop()
