"""Test helper utilities for the job portal core tests."""

from .clock import ManualClock
from .seed import seed_company, seed_job, seed_notification, seed_token, seed_user
from .ticker import ManualTicker, ScheduledJob

__all__ = [
    "ManualClock",
    "ManualTicker",
    "ScheduledJob",
    "seed_company",
    "seed_job",
    "seed_notification",
    "seed_token",
    "seed_user",
]
