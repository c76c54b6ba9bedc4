"""Result types and exceptions for the job-match notifier."""

from dataclasses import dataclass


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to missing variables or bad templates."""

    pass


@dataclass
class FanoutResult:
    """Outcome counters for one notification fan-out.

    Attributes:
        trigger: "job" or "user"
        subject_id: Id of the job or user that triggered the fan-out
        evaluated: Candidates scored
        qualified: Candidates at or above the threshold
        created: Notifications inserted
        duplicates: Qualified candidates skipped because a job_match already existed
        failed: Candidates whose check or insert raised
        aborted: True when the fan-out stopped early (notifications table missing)
    """

    trigger: str
    subject_id: int
    evaluated: int = 0
    qualified: int = 0
    created: int = 0
    duplicates: int = 0
    failed: int = 0
    aborted: bool = False

    def as_log_fields(self) -> dict:
        return {
            "trigger": self.trigger,
            "subject_id": self.subject_id,
            "evaluated": self.evaluated,
            "qualified": self.qualified,
            "notifications_created": self.created,
            "duplicates": self.duplicates,
            "failed": self.failed,
            "aborted": self.aborted,
        }
