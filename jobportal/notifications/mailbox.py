"""Per-user notification mailbox operations."""

from typing import Callable, ContextManager

from sqlalchemy.orm import Session

from jobportal.domain.models import Notification, NotificationPage, Pagination
from jobportal.logging import get_logger
from jobportal.persistence.database import get_session
from jobportal.persistence.repositories import NotificationRepository

logger = get_logger(__name__, component="mailbox")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class NotificationMailbox:
    """Read, mark and delete a user's notifications.

    Every operation is scoped to the owning user; touching another user's
    notification behaves as if it did not exist.
    """

    def __init__(self, session_scope: Callable[[], ContextManager[Session]] = get_session):
        self.session_scope = session_scope

    def list_for_user(
        self, user_id: int, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT
    ) -> NotificationPage:
        """Newest-first page of notifications with job title and company name."""
        page = page if page and page >= 1 else DEFAULT_PAGE
        limit = limit if limit and limit >= 1 else DEFAULT_LIMIT

        with self.session_scope() as session:
            notifications, total = NotificationRepository(session).list_for_user(
                user_id, limit=limit, offset=(page - 1) * limit
            )

        return NotificationPage(
            notifications=notifications,
            pagination=Pagination.build(page=page, per_page=limit, total_items=total),
        )

    def mark_as_read(self, user_id: int, notification_id: int) -> Notification:
        """Raises RecordNotFoundError when the notification is absent or not the user's."""
        with self.session_scope() as session:
            notification = NotificationRepository(session).mark_read(user_id, notification_id)

        logger.debug(
            f"Notification {notification_id} marked as read",
            extra={"event": "mailbox.marked_read", "user_id": user_id},
        )
        return notification

    def mark_all_as_read(self, user_id: int) -> int:
        with self.session_scope() as session:
            updated = NotificationRepository(session).mark_all_read(user_id)

        logger.info(
            f"Marked {updated} notifications as read for user {user_id}",
            extra={"event": "mailbox.marked_all_read", "user_id": user_id, "updated": updated},
        )
        return updated

    def unread_count(self, user_id: int) -> int:
        with self.session_scope() as session:
            return NotificationRepository(session).count_unread(user_id)

    def delete(self, user_id: int, notification_id: int) -> None:
        """Raises RecordNotFoundError when the notification is absent or not the user's."""
        with self.session_scope() as session:
            NotificationRepository(session).delete(user_id, notification_id)

        logger.debug(
            f"Notification {notification_id} deleted",
            extra={"event": "mailbox.deleted", "user_id": user_id},
        )

    def delete_all(self, user_id: int) -> int:
        with self.session_scope() as session:
            deleted = NotificationRepository(session).delete_all_for_user(user_id)

        logger.info(
            f"Deleted {deleted} notifications for user {user_id}",
            extra={"event": "mailbox.deleted_all", "user_id": user_id, "deleted": deleted},
        )
        return deleted
