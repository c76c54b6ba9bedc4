"""Scheduling of periodic retention sweeps."""

from .service import NOTIFICATION_SWEEP_JOB_ID, TOKEN_SWEEP_JOB_ID, SweepScheduler
from .ticker import APSchedulerTicker, Ticker

__all__ = [
    "SweepScheduler",
    "Ticker",
    "APSchedulerTicker",
    "TOKEN_SWEEP_JOB_ID",
    "NOTIFICATION_SWEEP_JOB_ID",
]
