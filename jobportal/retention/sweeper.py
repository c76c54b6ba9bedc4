"""Retention sweeps for expired reset tokens and aged notifications."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, ContextManager, List, Optional

from sqlalchemy.orm import Session

from jobportal.config.models import RetentionConfig
from jobportal.logging import get_logger
from jobportal.logging.context import log_context
from jobportal.persistence.database import get_session
from jobportal.persistence.exceptions import SchemaNotReadyError
from jobportal.persistence.repositories import (
    NotificationRepository,
    PasswordResetTokenRepository,
)
from jobportal.utils.timestamps import format_timestamp, utc_now

logger = get_logger(__name__, component="sweeper")

TOKENS = "expired_tokens"
NOTIFICATIONS = "old_notifications"


@dataclass
class SweepResult:
    """Outcome of one sweep.

    Attributes:
        name: Sweep type ("expired_tokens" or "old_notifications")
        deleted: Rows removed
        cutoff: Rows strictly older than this were eligible
        error: Error message when the sweep failed, else None
    """

    name: str
    deleted: int = 0
    cutoff: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class RetentionSweeper:
    """Deletes rows past their retention horizon.

    Each sweep runs in its own transaction and never raises: failures are
    logged and reported in the SweepResult, so one sweep type failing does
    not affect the other.
    """

    def __init__(
        self,
        config: Optional[RetentionConfig] = None,
        session_scope: Callable[[], ContextManager[Session]] = get_session,
        clock: Callable[[], datetime] = utc_now,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.config = config or RetentionConfig()
        self.session_scope = session_scope
        self.clock = clock
        self.logger = logger_instance or logger

    def sweep_expired_tokens(self) -> SweepResult:
        """Delete password-reset tokens whose expiry is before now, used or not."""
        now = self.clock()
        return self._sweep(
            TOKENS,
            now,
            lambda session: PasswordResetTokenRepository(session).delete_expired(now),
        )

    def sweep_old_notifications(self) -> SweepResult:
        """Delete notifications created before now minus the configured max age."""
        cutoff = self.clock() - timedelta(seconds=self.config.notification_max_age_seconds)
        return self._sweep(
            NOTIFICATIONS,
            cutoff,
            lambda session: NotificationRepository(session).delete_older_than(cutoff),
        )

    def run_all(self) -> List[SweepResult]:
        return [self.sweep_expired_tokens(), self.sweep_old_notifications()]

    def _sweep(
        self, name: str, cutoff: datetime, delete: Callable[[Session], int]
    ) -> SweepResult:
        result = SweepResult(name=name, cutoff=cutoff)

        with log_context(sweep=name):
            try:
                with self.session_scope() as session:
                    result.deleted = delete(session)
            except SchemaNotReadyError as e:
                result.error = str(e)
                self.logger.warning(
                    f"Skipping {name} sweep, table not provisioned: {e}",
                    extra={"event": f"sweeper.{name}.skipped"},
                )
                return result
            except Exception as e:
                result.error = str(e)
                self.logger.error(
                    f"Error during {name} sweep: {e}",
                    exc_info=True,
                    extra={"event": f"sweeper.{name}.failed", "error_type": type(e).__name__},
                )
                return result

            self.logger.info(
                f"Swept {result.deleted} rows ({name})",
                extra={
                    "event": f"sweeper.{name}.completed",
                    "deleted": result.deleted,
                    "cutoff": format_timestamp(cutoff),
                },
            )
        return result
