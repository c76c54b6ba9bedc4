"""Tests for the job-match notifier fan-outs."""

import logging
from contextlib import contextmanager
from unittest.mock import Mock, patch

import pytest

from jobportal.config.models import MatchingConfig
from jobportal.domain.models import JobStatus, NotificationType
from jobportal.notifications import FanoutResult, JobMatchNotifier
from jobportal.persistence import NotificationRepository, get_engine, get_session
from jobportal.persistence.schema import NotificationModel
from tests.helpers import ManualClock, seed_company, seed_job, seed_notification, seed_user


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def notifier(database, clock):
    return JobMatchNotifier(clock=clock)


def notifications_for(user_id, job_id):
    with get_session() as session:
        return NotificationRepository(session).list_for_pair(user_id, job_id)


class TestNotifyForJob:
    """Tests for the job-approved fan-out."""

    def test_creates_notification_for_matching_user(self, notifier, clock):
        company = seed_company("Acme Corp")
        user = seed_user("alice", skills=["python"])
        job = seed_job("Senior Python Engineer", company_id=company.id, created_at=clock())

        result = notifier.notify_for_job(job.id)

        assert result.created == 1
        [notification] = notifications_for(user.id, job.id)
        assert notification.type == NotificationType.JOB_MATCH
        assert notification.title == "New Job Match: Senior Python Engineer"
        assert notification.message == (
            "A new job at Acme Corp matches your skills! Match percentage: 100.0%"
        )
        assert notification.match_score == 2.0
        assert notification.match_percentage == 100.0
        assert notification.matched_skills == ["python"]
        assert notification.is_read is False
        assert notification.created_at == clock()

    def test_is_idempotent_under_repeated_invocation(self, notifier):
        user = seed_user("alice", skills=["python"])
        job = seed_job("Python Developer")

        first = notifier.notify_for_job(job.id)
        second = notifier.notify_for_job(job.id)

        assert first.created == 1
        assert second.created == 0
        assert second.duplicates == 1
        assert len(notifications_for(user.id, job.id)) == 1

    def test_other_notification_types_do_not_block(self, notifier):
        user = seed_user("alice", skills=["python"])
        job = seed_job("Python Developer")
        seed_notification(user.id, job.id, notification_type=NotificationType.APPLICATION_STATUS)

        result = notifier.notify_for_job(job.id)

        assert result.created == 1

    def test_below_threshold_not_notified(self, notifier):
        # 0.5 / 3 skills = 16.7%
        user = seed_user("alice", skills=["rust", "go", "sql"])
        job = seed_job("Backend", description="we use sql")

        result = notifier.notify_for_job(job.id)

        assert result.evaluated == 1
        assert result.qualified == 0
        assert notifications_for(user.id, job.id) == []

    def test_exactly_threshold_is_notified(self, notifier):
        # 1.0 / 4 skills = 25.0%
        user = seed_user("alice", skills=["python", "rust", "elixir", "haskell"])
        job = seed_job("Backend Developer", requirements="python required")

        result = notifier.notify_for_job(job.id)

        assert result.created == 1
        [notification] = notifications_for(user.id, job.id)
        assert notification.match_percentage == 25.0

    def test_users_without_skills_are_not_evaluated(self, notifier):
        seed_user("bob")
        seed_user("alice", skills=["python"])
        job = seed_job("Python Developer")

        result = notifier.notify_for_job(job.id)

        assert result.evaluated == 1

    def test_unapproved_job_is_skipped(self, notifier):
        seed_user("alice", skills=["python"])
        job = seed_job("Python Developer", status=JobStatus.PENDING)

        result = notifier.notify_for_job(job.id)

        assert result == FanoutResult(trigger="job", subject_id=job.id)

    def test_missing_job_is_skipped(self, notifier):
        result = notifier.notify_for_job(12345)

        assert result.evaluated == 0
        assert not result.aborted

    def test_job_without_company_uses_fallback_name(self, notifier):
        user = seed_user("alice", skills=["python"])
        job = seed_job("Python Developer")

        notifier.notify_for_job(job.id)

        [notification] = notifications_for(user.id, job.id)
        assert "Unknown Company" in notification.message

    def test_failure_for_one_candidate_does_not_stop_others(self, notifier):
        alice = seed_user("alice", skills=["python"])
        bob = seed_user("bob", skills=["python"])
        job = seed_job("Python Developer")
        original_create = NotificationRepository.create

        def flaky_create(self, notification):
            if notification.user_id == alice.id:
                raise RuntimeError("insert failed")
            return original_create(self, notification)

        with patch.object(NotificationRepository, "create", flaky_create):
            result = notifier.notify_for_job(job.id)

        assert result.failed == 1
        assert result.created == 1
        assert notifications_for(alice.id, job.id) == []
        assert len(notifications_for(bob.id, job.id)) == 1

    def test_missing_notifications_table_aborts_quietly(self, notifier):
        seed_user("alice", skills=["python"])
        seed_user("bob", skills=["python"])
        job = seed_job("Python Developer")
        NotificationModel.__table__.drop(get_engine())

        result = notifier.notify_for_job(job.id)

        assert result.aborted is True
        assert result.evaluated == 1
        assert result.created == 0

    def test_load_failure_does_not_raise(self, clock):
        @contextmanager
        def broken_scope():
            raise RuntimeError("database unavailable")
            yield

        notifier = JobMatchNotifier(session_scope=broken_scope, clock=clock)

        result = notifier.notify_for_job(1)

        assert result.aborted is True
        assert result.evaluated == 0

    def test_logs_completion_summary(self, database, clock):
        mock_logger = Mock()
        notifier = JobMatchNotifier(clock=clock, logger_instance=mock_logger)
        seed_user("alice", skills=["python"])
        job = seed_job("Python Developer")

        notifier.notify_for_job(job.id)

        events = [c.kwargs["extra"]["event"] for c in mock_logger.info.call_args_list]
        assert events[0] == "notifier.fanout.started"
        assert "notifier.notification.created" in events
        assert events[-1] == "notifier.fanout.completed"

    def test_completion_summary_reaches_real_log_records(self, notifier, caplog):
        caplog.set_level(logging.INFO)
        seed_user("alice", skills=["python"])
        job = seed_job("Python Developer")

        result = notifier.notify_for_job(job.id)

        assert result.created == 1
        [completed] = [
            r for r in caplog.records if getattr(r, "event", None) == "notifier.fanout.completed"
        ]
        assert completed.notifications_created == 1
        assert completed.evaluated == 1

    def test_abort_is_logged_as_warning(self, notifier, caplog):
        caplog.set_level(logging.WARNING)
        seed_user("alice", skills=["python"])
        job = seed_job("Python Developer")
        NotificationModel.__table__.drop(get_engine())

        result = notifier.notify_for_job(job.id)

        assert result.aborted is True
        [aborted] = [
            r for r in caplog.records if getattr(r, "event", None) == "notifier.fanout.aborted"
        ]
        assert aborted.levelno == logging.WARNING
        assert aborted.notifications_created == 0


class TestNotifyForUser:
    """Tests for the skills-added fan-out."""

    def test_recency_window(self, notifier, clock):
        user = seed_user("alice", skills=["python"])
        recent = seed_job("Python Developer", created_at=clock.ago(days=29))
        stale = seed_job("Python Architect", created_at=clock.ago(days=31))

        result = notifier.notify_for_user(user.id)

        assert result.evaluated == 1
        assert len(notifications_for(user.id, recent.id)) == 1
        assert notifications_for(user.id, stale.id) == []

    def test_only_approved_jobs_considered(self, notifier, clock):
        user = seed_user("alice", skills=["python"])
        seed_job("Python Developer", status=JobStatus.REJECTED, created_at=clock())

        result = notifier.notify_for_user(user.id)

        assert result.evaluated == 0

    def test_user_without_skills_is_skipped(self, notifier, clock):
        user = seed_user("bob")
        seed_job("Python Developer", created_at=clock())

        result = notifier.notify_for_user(user.id)

        assert result.evaluated == 0
        assert not result.aborted

    def test_unknown_user_is_skipped(self, notifier):
        result = notifier.notify_for_user(999)

        assert result.evaluated == 0

    def test_uses_full_current_skill_set(self, notifier, clock):
        # Two skills, one in the title: 2.0 / 2 = 100%
        user = seed_user("alice", skills=["python", "sql"])
        job = seed_job("Python Developer", created_at=clock())

        notifier.notify_for_user(user.id)

        [notification] = notifications_for(user.id, job.id)
        assert notification.match_percentage == 100.0
        assert notification.matched_skills == ["python"]

    def test_does_not_duplicate_job_fanout(self, notifier, clock):
        user = seed_user("alice", skills=["python"])
        job = seed_job("Python Developer", created_at=clock())

        notifier.notify_for_job(job.id)
        result = notifier.notify_for_user(user.id)

        assert result.duplicates == 1
        assert len(notifications_for(user.id, job.id)) == 1

    def test_configurable_window_and_threshold(self, database, clock):
        config = MatchingConfig(recency_window_days=7, notify_threshold=60.0)
        notifier = JobMatchNotifier(config=config, clock=clock)
        user = seed_user("alice", skills=["python", "sql"])
        seed_job("Python Developer", created_at=clock.ago(days=8))
        job = seed_job("Backend", requirements="python and sql", created_at=clock.ago(days=1))

        result = notifier.notify_for_user(user.id)

        assert result.evaluated == 1
        assert result.created == 1
        assert notifications_for(user.id, job.id)[0].match_percentage == 100.0
