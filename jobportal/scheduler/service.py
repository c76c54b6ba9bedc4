"""Scheduler service for periodic retention sweeps."""

import threading
from typing import List, Optional

from jobportal.config.models import RetentionConfig
from jobportal.logging import get_logger
from jobportal.retention import RetentionSweeper, SweepResult

from .ticker import APSchedulerTicker, Ticker

logger = get_logger(__name__, component="scheduler")

TOKEN_SWEEP_JOB_ID = "sweep-expired-tokens"
NOTIFICATION_SWEEP_JOB_ID = "sweep-old-notifications"


class SweepScheduler:
    """
    Registers the retention sweeps on a ticker.

    The token sweep runs every token_sweep_interval (first run after one
    interval). The notification sweep runs every notification_sweep_interval
    with its first run shortly after startup.
    """

    def __init__(
        self,
        sweeper: RetentionSweeper,
        ticker: Optional[Ticker] = None,
        config: Optional[RetentionConfig] = None,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the sweep scheduler.

        Args:
            sweeper: Sweeper whose methods are scheduled
            ticker: Periodic runner (APSchedulerTicker if None)
            config: Retention cadence (defaults to the sweeper's config)
            shutdown_event: Optional event to set on shutdown for coordination
        """
        self.sweeper = sweeper
        self.ticker = ticker or APSchedulerTicker()
        self.config = config or sweeper.config
        self.shutdown_event = shutdown_event

    def start(self) -> None:
        """Register both sweeps and start the ticker."""
        self.ticker.every(
            TOKEN_SWEEP_JOB_ID,
            "Expired reset token sweep",
            self.config.token_sweep_interval_seconds,
            self.sweeper.sweep_expired_tokens,
        )
        self.ticker.every(
            NOTIFICATION_SWEEP_JOB_ID,
            "Aged notification sweep",
            self.config.notification_sweep_interval_seconds,
            self.sweeper.sweep_old_notifications,
            first_run_delay_seconds=self.config.notification_sweep_initial_delay_seconds,
        )
        self.ticker.start()

        logger.info(
            "Sweep scheduler started",
            extra={
                "event": "scheduler.started",
                "token_sweep_interval_seconds": self.config.token_sweep_interval_seconds,
                "notification_sweep_interval_seconds": (
                    self.config.notification_sweep_interval_seconds
                ),
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """
        Stop the ticker.

        Args:
            wait: If True, wait for running sweeps to complete before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        self.ticker.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> List[SweepResult]:
        """Run both sweeps synchronously in the current thread."""
        logger.info("Triggering immediate sweeps", extra={"event": "scheduler.trigger_now"})
        return self.sweeper.run_all()

    def is_running(self) -> bool:
        return self.ticker.running
