"""In-app job-match notifications.

This module provides:
- JobMatchNotifier: fan-outs that create job_match notifications
- FanoutResult: per fan-out outcome counters
- NotificationMailbox: per-user list, mark-read and delete operations
- MatchTriggers: non-blocking entry points for job approval and new skills
- TemplateRenderer: Jinja2 rendering of notification title and message
"""

from .mailbox import NotificationMailbox
from .models import FanoutResult, NotificationError, NotificationTemplateError
from .service import JobMatchNotifier
from .templates import TemplateRenderer
from .triggers import MatchTriggers

__all__ = [
    "JobMatchNotifier",
    "FanoutResult",
    "NotificationMailbox",
    "MatchTriggers",
    "TemplateRenderer",
    "NotificationError",
    "NotificationTemplateError",
]
