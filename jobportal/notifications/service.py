"""Job-match notification fan-outs.

Two entry points feed the same per-candidate step:
- notify_for_job: a job was approved; score every user that has skills
- notify_for_user: a user added skills; score every recent approved job

A candidate qualifies when its match percentage reaches the configured
threshold and no job_match notification exists yet for the (user, job) pair.
Each candidate's check and insert run in their own session, so one failing
candidate never blocks or half-writes another. A missing notifications table
stops the fan-out quietly; nothing here raises to the caller.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, ContextManager, List, Optional

from sqlalchemy.orm import Session

from jobportal.config.models import MatchingConfig
from jobportal.domain.models import JobWithCompany, Notification, NotificationType, UserWithSkills
from jobportal.logging import get_logger
from jobportal.logging.context import log_context
from jobportal.matching.engine import SkillMatcher
from jobportal.matching.models import MatchResult
from jobportal.persistence.database import get_session
from jobportal.persistence.exceptions import SchemaNotReadyError
from jobportal.persistence.repositories import (
    JobRepository,
    NotificationRepository,
    UserRepository,
)
from jobportal.utils.timestamps import utc_now

from .models import FanoutResult
from .templates import TemplateRenderer

logger = get_logger(__name__, component="notifier")

UNKNOWN_COMPANY = "Unknown Company"


class JobMatchNotifier:
    """Creates job_match notifications for qualifying (user, job) pairs."""

    def __init__(
        self,
        matcher: Optional[SkillMatcher] = None,
        renderer: Optional[TemplateRenderer] = None,
        config: Optional[MatchingConfig] = None,
        session_scope: Callable[[], ContextManager[Session]] = get_session,
        clock: Callable[[], datetime] = utc_now,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize the notifier.

        Args:
            matcher: Skill matcher (built from config if None)
            renderer: Template renderer (creates default if None)
            config: Matching configuration (threshold, recency window)
            session_scope: Factory for transactional sessions
            clock: Returns the current UTC time
            logger_instance: Logger instance (uses module logger if None)
        """
        self.config = config or MatchingConfig()
        self.matcher = matcher or SkillMatcher(self.config)
        self.renderer = renderer or TemplateRenderer()
        self.session_scope = session_scope
        self.clock = clock
        self.logger = logger_instance or logger

    def notify_for_job(self, job_id: int) -> FanoutResult:
        """Fan out a newly approved job to every user with at least one skill."""
        result = FanoutResult(trigger="job", subject_id=job_id)

        with log_context(fanout_id=_new_fanout_id(), trigger="job", job_id=job_id):
            self.logger.info(
                f"Starting job fan-out for job {job_id}",
                extra={"event": "notifier.fanout.started"},
            )

            try:
                with self.session_scope() as session:
                    job = JobRepository(session).get_approved(job_id)
                    users: List[UserWithSkills] = (
                        UserRepository(session).list_with_skills() if job is not None else []
                    )
            except SchemaNotReadyError as e:
                return self._abort(result, e)
            except Exception as e:
                return self._fail_load(result, e)

            if job is None:
                self.logger.info(
                    f"Job {job_id} not found or not approved, nothing to notify",
                    extra={"event": "notifier.fanout.skipped", "reason": "job_not_approved"},
                )
                return result

            for user in users:
                if not self._process_candidate(user, job, result):
                    break

            self._log_completed(result)
        return result

    def notify_for_user(self, user_id: int) -> FanoutResult:
        """Fan out a user's current skill set to approved jobs inside the recency window."""
        result = FanoutResult(trigger="user", subject_id=user_id)

        with log_context(fanout_id=_new_fanout_id(), trigger="user", user_id=user_id):
            self.logger.info(
                f"Starting skills fan-out for user {user_id}",
                extra={"event": "notifier.fanout.started"},
            )

            cutoff = self.clock() - timedelta(days=self.config.recency_window_days)
            try:
                with self.session_scope() as session:
                    user = UserRepository(session).get_with_skills(user_id)
                    jobs: List[JobWithCompany] = []
                    if user is not None and user.has_skills:
                        jobs = JobRepository(session).list_approved_since(cutoff)
            except SchemaNotReadyError as e:
                return self._abort(result, e)
            except Exception as e:
                return self._fail_load(result, e)

            if user is None or not user.has_skills:
                self.logger.info(
                    f"User {user_id} not found or has no skills, nothing to notify",
                    extra={"event": "notifier.fanout.skipped", "reason": "no_skills"},
                )
                return result

            for job in jobs:
                if not self._process_candidate(user, job, result):
                    break

            self._log_completed(result)
        return result

    def build_notification(
        self, user_id: int, job: JobWithCompany, match: MatchResult
    ) -> Notification:
        """Render the mailbox entry for a qualifying match."""
        rendered = self.renderer.render(
            {
                "job_title": job.title,
                "company_name": job.company_name or UNKNOWN_COMPANY,
                "match_percentage": match.match_percentage,
            }
        )
        return Notification(
            user_id=user_id,
            job_id=job.id,
            type=NotificationType.JOB_MATCH,
            title=rendered["title"],
            message=rendered["message"],
            match_score=match.match_score,
            match_percentage=match.match_percentage,
            matched_skills=match.matched_skills,
            created_at=self.clock(),
        )

    def _process_candidate(
        self, user: UserWithSkills, job: JobWithCompany, result: FanoutResult
    ) -> bool:
        """Score one pair and create its notification when it qualifies.

        Returns:
            False when the fan-out must stop (notifications table missing)
        """
        match = self.matcher.score(user.skills, job)
        result.evaluated += 1

        if not match.qualifies(self.config.notify_threshold):
            return True
        result.qualified += 1

        fields = {"user_id": user.id, "job_id": job.id}
        try:
            with self.session_scope() as session:
                repo = NotificationRepository(session)
                if repo.exists_for_pair(user.id, job.id, NotificationType.JOB_MATCH):
                    result.duplicates += 1
                    self.logger.debug(
                        f"Notification already exists for user {user.id}, job {job.id}",
                        extra={"event": "notifier.notification.duplicate", **fields},
                    )
                    return True
                repo.create(self.build_notification(user.id, job, match))

            result.created += 1
            self.logger.info(
                f"Created job match notification for user {user.id}, job {job.id} "
                f"({match.match_percentage:.1f}%)",
                extra={
                    "event": "notifier.notification.created",
                    "match_percentage": match.match_percentage,
                    **fields,
                },
            )
        except SchemaNotReadyError as e:
            self._abort(result, e)
            return False
        except Exception as e:
            result.failed += 1
            self.logger.error(
                f"Failed to create notification for user {user.id}, job {job.id}: {e}",
                exc_info=True,
                extra={
                    "event": "notifier.notification.failed",
                    "error_type": type(e).__name__,
                    **fields,
                },
            )
        return True

    def _abort(self, result: FanoutResult, error: Exception) -> FanoutResult:
        result.aborted = True
        self.logger.warning(
            f"Notification tables not provisioned, skipping fan-out: {error}",
            extra={"event": "notifier.fanout.aborted", **result.as_log_fields()},
        )
        return result

    def _fail_load(self, result: FanoutResult, error: Exception) -> FanoutResult:
        result.aborted = True
        self.logger.error(
            f"Failed to load fan-out candidates: {error}",
            exc_info=True,
            extra={"event": "notifier.fanout.failed", "error_type": type(error).__name__},
        )
        return result

    def _log_completed(self, result: FanoutResult) -> None:
        self.logger.info(
            f"Fan-out complete: {result.created} created, {result.duplicates} duplicates, "
            f"{result.failed} failed ({result.evaluated} evaluated)",
            extra={"event": "notifier.fanout.completed", **result.as_log_fields()},
        )


def _new_fanout_id() -> str:
    return uuid.uuid4().hex[:12]
