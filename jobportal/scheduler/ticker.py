"""Periodic execution port and its APScheduler implementation."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from jobportal.logging import get_logger

logger = get_logger(__name__, component="scheduler")


class Ticker(ABC):
    """Runs callables at fixed intervals.

    Tests substitute a manual implementation that advances simulated time.
    """

    @abstractmethod
    def every(
        self,
        job_id: str,
        name: str,
        interval_seconds: int,
        func: Callable[[], object],
        first_run_delay_seconds: Optional[float] = None,
    ) -> None:
        """Register func to run every interval_seconds.

        The first run happens after first_run_delay_seconds when given,
        otherwise after one full interval.
        """

    @abstractmethod
    def start(self) -> None:
        """Begin running registered jobs."""

    @abstractmethod
    def shutdown(self, wait: bool = False) -> None:
        """Stop running jobs."""

    @property
    @abstractmethod
    def running(self) -> bool:
        """True between start() and shutdown()."""


class APSchedulerTicker(Ticker):
    """Ticker backed by an APScheduler BackgroundScheduler.

    Overlapping runs of the same job are prevented and delayed runs coalesce
    into one.
    """

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self.scheduler = scheduler or BackgroundScheduler(
            job_defaults={
                "max_instances": 1,  # Prevent overlapping runs
                "coalesce": True,  # If run is delayed, only execute once
            },
            timezone=timezone.utc,
        )

    def every(
        self,
        job_id: str,
        name: str,
        interval_seconds: int,
        func: Callable[[], object],
        first_run_delay_seconds: Optional[float] = None,
    ) -> None:
        job_kwargs = {}
        if first_run_delay_seconds is not None:
            job_kwargs["next_run_time"] = datetime.now(timezone.utc) + timedelta(
                seconds=first_run_delay_seconds
            )

        self.scheduler.add_job(
            func=func,
            trigger=IntervalTrigger(seconds=interval_seconds, timezone=timezone.utc),
            id=job_id,
            name=name,
            replace_existing=True,
            misfire_grace_time=interval_seconds,
            **job_kwargs,
        )
        logger.debug(
            f"Registered {name} every {interval_seconds} seconds",
            extra={
                "event": "scheduler.job.registered",
                "job_id": job_id,
                "interval_seconds": interval_seconds,
                "first_run_delay_seconds": first_run_delay_seconds,
            },
        )

    def start(self) -> None:
        self.scheduler.start()

    def shutdown(self, wait: bool = False) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self, job_id: str) -> Optional[datetime]:
        job = self.scheduler.get_job(job_id)
        return job.next_run_time if job else None
