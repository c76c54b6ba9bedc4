"""Retention sweeps for tokens and notifications."""

from .sweeper import NOTIFICATIONS, TOKENS, RetentionSweeper, SweepResult

__all__ = ["RetentionSweeper", "SweepResult", "TOKENS", "NOTIFICATIONS"]
