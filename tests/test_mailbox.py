"""Tests for the notification mailbox."""

from datetime import timedelta

import pytest

from jobportal.notifications import NotificationMailbox
from jobportal.persistence import RecordNotFoundError
from jobportal.utils.timestamps import utc_now
from tests.helpers import seed_company, seed_job, seed_notification, seed_user


@pytest.fixture
def mailbox(database):
    return NotificationMailbox()


@pytest.fixture
def inbox():
    """Alice with three notifications (oldest first) and Bob with one."""
    company = seed_company("Initech")
    job = seed_job("QA Engineer", company_id=company.id)
    alice = seed_user("alice")
    bob = seed_user("bob")
    now = utc_now()
    alice_notes = [
        seed_notification(alice.id, job.id, created_at=now - timedelta(minutes=30 - i))
        for i in range(3)
    ]
    bob_note = seed_notification(bob.id, job.id, created_at=now)
    return alice, bob, alice_notes, bob_note


class TestListing:
    def test_newest_first_with_pagination(self, mailbox, inbox):
        alice, _, notes, _ = inbox

        page = mailbox.list_for_user(alice.id, page=1, limit=2)

        assert [n.id for n in page.notifications] == [notes[2].id, notes[1].id]
        assert page.notifications[0].job_title == "QA Engineer"
        assert page.notifications[0].company_name == "Initech"
        assert page.pagination.total_items == 3
        assert page.pagination.total_pages == 2
        assert page.pagination.has_next_page is True
        assert page.pagination.has_prev_page is False

    def test_second_page(self, mailbox, inbox):
        alice, _, notes, _ = inbox

        page = mailbox.list_for_user(alice.id, page=2, limit=2)

        assert [n.id for n in page.notifications] == [notes[0].id]
        assert page.pagination.has_next_page is False
        assert page.pagination.has_prev_page is True

    def test_invalid_page_and_limit_fall_back_to_defaults(self, mailbox, inbox):
        alice, _, _, _ = inbox

        page = mailbox.list_for_user(alice.id, page=0, limit=-5)

        assert page.pagination.current_page == 1
        assert page.pagination.per_page == 10
        assert len(page.notifications) == 3

    def test_empty_mailbox(self, mailbox):
        user = seed_user("carol")

        page = mailbox.list_for_user(user.id)

        assert page.notifications == []
        assert page.pagination.total_pages == 0


class TestReadState:
    def test_mark_as_read(self, mailbox, inbox):
        alice, _, notes, _ = inbox

        updated = mailbox.mark_as_read(alice.id, notes[0].id)

        assert updated.is_read is True
        assert mailbox.unread_count(alice.id) == 2

    def test_mark_as_read_of_other_users_notification(self, mailbox, inbox):
        alice, _, _, bob_note = inbox

        with pytest.raises(RecordNotFoundError):
            mailbox.mark_as_read(alice.id, bob_note.id)

    def test_mark_all_as_read_counts_only_unread(self, mailbox, inbox):
        alice, bob, notes, _ = inbox
        mailbox.mark_as_read(alice.id, notes[0].id)

        assert mailbox.mark_all_as_read(alice.id) == 2
        assert mailbox.unread_count(alice.id) == 0
        assert mailbox.unread_count(bob.id) == 1


class TestDeletion:
    def test_delete(self, mailbox, inbox):
        alice, _, notes, _ = inbox

        mailbox.delete(alice.id, notes[1].id)

        remaining = mailbox.list_for_user(alice.id).notifications
        assert notes[1].id not in [n.id for n in remaining]

    def test_delete_missing(self, mailbox, inbox):
        alice, _, _, _ = inbox

        with pytest.raises(RecordNotFoundError):
            mailbox.delete(alice.id, 9999)

    def test_delete_all_only_touches_owner(self, mailbox, inbox):
        alice, bob, _, _ = inbox

        assert mailbox.delete_all(alice.id) == 3
        assert mailbox.list_for_user(alice.id).pagination.total_items == 0
        assert mailbox.list_for_user(bob.id).pagination.total_items == 1
