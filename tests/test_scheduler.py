"""Unit tests for the sweep scheduler and tickers.

Covers:
- Sweep registration cadence (hourly tokens, daily notifications with a short first delay)
- Simulated time with the manual ticker
- APScheduler ticker configuration and lifecycle
"""

import threading
import time
from unittest.mock import Mock

import pytest

from jobportal.config.models import RetentionConfig
from jobportal.retention import RetentionSweeper
from jobportal.scheduler import (
    NOTIFICATION_SWEEP_JOB_ID,
    TOKEN_SWEEP_JOB_ID,
    APSchedulerTicker,
    SweepScheduler,
)
from tests.helpers import (
    ManualClock,
    ManualTicker,
    seed_job,
    seed_notification,
    seed_token,
    seed_user,
)


@pytest.fixture
def mock_sweeper():
    sweeper = Mock(spec=RetentionSweeper)
    sweeper.config = RetentionConfig()
    return sweeper


class TestSweepScheduler:
    """Tests for SweepScheduler with a manual ticker."""

    def test_registers_both_sweeps(self, mock_sweeper):
        ticker = ManualTicker()

        SweepScheduler(mock_sweeper, ticker=ticker).start()

        tokens = ticker.jobs[TOKEN_SWEEP_JOB_ID]
        notifications = ticker.jobs[NOTIFICATION_SWEEP_JOB_ID]
        assert tokens.interval_seconds == 3600
        assert tokens.next_run == 3600
        assert notifications.interval_seconds == 86400
        assert notifications.next_run == 5
        assert ticker.running

    def test_first_notification_sweep_after_five_seconds(self, mock_sweeper):
        ticker = ManualTicker()
        SweepScheduler(mock_sweeper, ticker=ticker).start()

        ticker.advance(4)
        mock_sweeper.sweep_old_notifications.assert_not_called()

        ticker.advance(1)
        mock_sweeper.sweep_old_notifications.assert_called_once()
        mock_sweeper.sweep_expired_tokens.assert_not_called()

    def test_one_day_of_ticks(self, mock_sweeper):
        ticker = ManualTicker()
        SweepScheduler(mock_sweeper, ticker=ticker).start()

        ticker.advance(86400)

        assert mock_sweeper.sweep_expired_tokens.call_count == 24
        assert mock_sweeper.sweep_old_notifications.call_count == 1

        ticker.advance(5)
        assert mock_sweeper.sweep_old_notifications.call_count == 2

    def test_shutdown_sets_event_and_stops_ticker(self, mock_sweeper):
        ticker = ManualTicker()
        event = threading.Event()
        scheduler = SweepScheduler(mock_sweeper, ticker=ticker, shutdown_event=event)
        scheduler.start()

        scheduler.shutdown()

        assert event.is_set()
        assert not scheduler.is_running()

    def test_trigger_now_runs_all_sweeps(self, mock_sweeper):
        scheduler = SweepScheduler(mock_sweeper, ticker=ManualTicker())

        scheduler.trigger_now()

        mock_sweeper.run_all.assert_called_once()

    def test_simulated_retention_over_time(self, database):
        """Notifications age out on the daily sweep once past 90 days."""
        clock = ManualClock()
        ticker = ManualTicker(clock)
        user = seed_user("alice")
        job = seed_job("Python Developer")
        seed_notification(user.id, job.id, created_at=clock.ago(days=89))
        seed_token(user.id, expires=clock.ago(seconds=1))

        sweeper = RetentionSweeper(clock=clock)
        results = []
        sweeper.sweep_old_notifications = _recording(sweeper.sweep_old_notifications, results)
        sweeper.sweep_expired_tokens = _recording(sweeper.sweep_expired_tokens, results)
        SweepScheduler(sweeper, ticker=ticker).start()

        ticker.advance(5)
        assert [r.deleted for r in results] == [0]

        ticker.advance(86400)
        deleted = {r.name: r.deleted for r in results if r.deleted}
        assert deleted == {"expired_tokens": 1, "old_notifications": 1}


def _recording(func, sink):
    def wrapper():
        result = func()
        sink.append(result)
        return result

    return wrapper


class TestAPSchedulerTicker:
    """Tests for the APScheduler-backed ticker."""

    def test_job_defaults(self):
        ticker = APSchedulerTicker()

        assert ticker.scheduler.job_defaults["max_instances"] == 1
        assert ticker.scheduler.job_defaults["coalesce"] is True

    def test_first_run_delay(self):
        calls = []
        ticker = APSchedulerTicker()
        ticker.every(
            "fast", "Fast job", 3600, lambda: calls.append(1), first_run_delay_seconds=0.2
        )

        ticker.start()
        time.sleep(1.0)
        ticker.shutdown(wait=True)

        assert len(calls) == 1
        assert not ticker.running

    def test_default_first_run_is_one_interval_away(self):
        ticker = APSchedulerTicker()
        ticker.every("slow", "Slow job", 3600, Mock())
        ticker.start()

        try:
            next_run = ticker.get_next_run_time("slow")
            assert next_run is not None
            assert next_run.timestamp() - time.time() > 3500
        finally:
            ticker.shutdown()
