"""Tests for retention sweeps."""

from contextlib import contextmanager
from datetime import timedelta
from unittest.mock import patch

import pytest

from jobportal.config.models import RetentionConfig
from jobportal.persistence import NotificationRepository, PasswordResetTokenRepository, get_session
from jobportal.retention import NOTIFICATIONS, TOKENS, RetentionSweeper
from tests.helpers import ManualClock, seed_job, seed_notification, seed_token, seed_user


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sweeper(database, clock):
    return RetentionSweeper(clock=clock)


@pytest.fixture
def owner(database):
    user = seed_user("alice")
    job = seed_job("Python Developer")
    return user, job


def remaining_notifications(user_id, job_id):
    with get_session() as session:
        return NotificationRepository(session).list_for_pair(user_id, job_id)


class TestNotificationSweep:
    def test_deletes_notifications_older_than_90_days(self, sweeper, clock, owner):
        user, job = owner
        seed_notification(user.id, job.id, created_at=clock.ago(days=91))
        kept = seed_notification(user.id, job.id, created_at=clock.ago(days=89))

        result = sweeper.sweep_old_notifications()

        assert result.name == NOTIFICATIONS
        assert result.deleted == 1
        assert result.succeeded
        assert result.cutoff == clock.ago(days=90)
        assert [n.id for n in remaining_notifications(user.id, job.id)] == [kept.id]

    def test_read_state_does_not_matter(self, sweeper, clock, owner):
        user, job = owner
        seed_notification(user.id, job.id, created_at=clock.ago(days=120), is_read=False)
        seed_notification(user.id, job.id, created_at=clock.ago(days=120), is_read=True)

        assert sweeper.sweep_old_notifications().deleted == 2

    def test_configurable_horizon(self, database, clock, owner):
        user, job = owner
        sweeper = RetentionSweeper(
            config=RetentionConfig(notification_max_age="7d"), clock=clock
        )
        seed_notification(user.id, job.id, created_at=clock.ago(days=8))

        assert sweeper.sweep_old_notifications().deleted == 1


class TestTokenSweep:
    def test_deletes_only_expired_tokens(self, sweeper, clock, owner):
        user, _ = owner
        seed_token(user.id, expires=clock.ago(seconds=1), token_hash="expired")
        seed_token(user.id, expires=clock() + timedelta(seconds=1), token_hash="live")

        result = sweeper.sweep_expired_tokens()

        assert result.name == TOKENS
        assert result.deleted == 1
        with get_session() as session:
            repo = PasswordResetTokenRepository(session)
            assert repo.get_by_hash("expired") is None
            assert repo.get_by_hash("live") is not None

    def test_used_but_unexpired_token_is_kept(self, sweeper, clock, owner):
        user, _ = owner
        seed_token(user.id, expires=clock() + timedelta(hours=1), used=True)

        assert sweeper.sweep_expired_tokens().deleted == 0


class TestIsolation:
    def test_notification_failure_does_not_block_token_sweep(self, sweeper, clock, owner):
        user, _ = owner
        seed_token(user.id, expires=clock.ago(minutes=1))

        with patch.object(
            NotificationRepository, "delete_older_than", side_effect=RuntimeError("disk full")
        ):
            tokens, notifications = sweeper.run_all()

        assert tokens.succeeded and tokens.deleted == 1
        assert not notifications.succeeded
        assert "disk full" in notifications.error

    def test_session_failure_is_captured(self, clock):
        @contextmanager
        def broken_scope():
            raise RuntimeError("database unavailable")
            yield

        sweeper = RetentionSweeper(session_scope=broken_scope, clock=clock)

        results = sweeper.run_all()

        assert [r.succeeded for r in results] == [False, False]

    def test_missing_table_is_reported_not_raised(self, sweeper):
        from jobportal.persistence import get_engine
        from jobportal.persistence.schema import NotificationModel

        NotificationModel.__table__.drop(get_engine())

        result = sweeper.sweep_old_notifications()

        assert result.error is not None
        assert result.deleted == 0
