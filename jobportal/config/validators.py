"""Non-fatal configuration checks."""

import warnings
from typing import List

from .models import AppConfig


def check_for_warnings(app_config: AppConfig) -> List[str]:
    """Return warnings for settings that are valid but probably unintended."""
    messages = []
    matching = app_config.matching

    if matching.notify_threshold == 0:
        messages.append(
            "matching.notify_threshold is 0: every user with any skill overlap will be notified"
        )

    if not (matching.title_weight >= matching.requirements_weight >= matching.description_weight):
        messages.append(
            "Matching weights are not ordered title >= requirements >= description; "
            "a skill is still counted once, in the first field (title, requirements, description) "
            "where it appears"
        )

    if matching.recency_window_days > 90:
        messages.append(
            f"matching.recency_window_days is {matching.recency_window_days}: "
            "adding a skill rescans a large share of the job table"
        )

    return messages


def emit_warnings(messages: List[str]) -> None:
    """Emit each message as a UserWarning."""
    for message in messages:
        warnings.warn(message, UserWarning, stacklevel=2)
