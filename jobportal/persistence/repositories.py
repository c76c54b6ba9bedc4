"""Data access layer (repositories) for persistence operations.

Repositories wrap a caller-owned session, translate SQLAlchemy errors into the
persistence exception family and return domain models, never ORM objects.
"""

import logging
from datetime import datetime
from typing import List, NoReturn, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from jobportal.domain.models import (
    CompanyRef,
    JobStatus,
    JobWithCompany,
    Notification,
    NotificationType,
    PasswordResetToken,
    SkillRef,
    UserWithSkills,
)
from jobportal.utils.timestamps import format_db_timestamp

from .exceptions import (
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
    SchemaNotReadyError,
)
from .schema import (
    CompanyModel,
    JobModel,
    NotificationModel,
    PasswordResetTokenModel,
    SkillModel,
    UserModel,
)

logger = logging.getLogger(__name__)


def is_missing_table_error(error: Exception) -> bool:
    """Detect "table does not exist" across SQLite, MySQL and PostgreSQL."""
    if not isinstance(error, (OperationalError, ProgrammingError)):
        return False

    message = str(error).lower()
    if "no such table" in message or "doesn't exist" in message:
        return True
    return "relation" in message and "does not exist" in message


def _raise_persistence_error(error: SQLAlchemyError, action: str) -> NoReturn:
    """Translate a SQLAlchemy error into the persistence exception family."""
    if is_missing_table_error(error):
        logger.warning(f"Cannot {action}: table not provisioned yet ({error})")
        raise SchemaNotReadyError(f"Failed to {action}: table not provisioned") from error

    if isinstance(error, IntegrityError):
        logger.error(f"Integrity error while trying to {action}: {error}")
        raise DataIntegrityError(f"Failed to {action} due to constraint violation: {error}") from error

    logger.error(f"Error while trying to {action}: {error}", exc_info=True)
    raise PersistenceError(f"Failed to {action}: {error}") from error


class CompanyRepository:
    """Repository for employer records."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, name: str, created_at: datetime) -> CompanyRef:
        try:
            model = CompanyModel(name=name, created_at=format_db_timestamp(created_at))
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"create company {name!r}")


class UserRepository:
    """Repository for users and their skill sets."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, username: str, email: str, created_at: datetime) -> UserWithSkills:
        try:
            model = UserModel(
                username=username, email=email, created_at=format_db_timestamp(created_at)
            )
            self.session.add(model)
            self.session.flush()
            return UserWithSkills(id=model.id, username=model.username, skills=[])
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"create user {username!r}")

    def get_with_skills(self, user_id: int) -> Optional[UserWithSkills]:
        """Load a user with their current full skill set, or None."""
        try:
            stmt = (
                select(UserModel)
                .where(UserModel.id == user_id)
                .options(selectinload(UserModel.skills))
            )
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"retrieve user {user_id}")

    def list_with_skills(self) -> List[UserWithSkills]:
        """All users that own at least one skill, ordered by id."""
        try:
            stmt = (
                select(UserModel)
                .where(UserModel.skills.any())
                .options(selectinload(UserModel.skills))
                .order_by(UserModel.id)
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            _raise_persistence_error(e, "list users with skills")


class SkillRepository:
    """Repository for per-user skills."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_name(self, user_id: int, name: str) -> Optional[SkillRef]:
        try:
            stmt = select(SkillModel).where(SkillModel.user_id == user_id, SkillModel.name == name)
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"retrieve skill {name!r} for user {user_id}")

    def add(self, user_id: int, skill: SkillRef, created_at: datetime) -> SkillRef:
        """Insert a skill.

        Raises:
            DataIntegrityError: If the user already has a skill with this name
        """
        try:
            model = SkillModel(
                user_id=user_id,
                name=skill.name,
                level=skill.level,
                created_at=format_db_timestamp(created_at),
            )
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"add skill {skill.name!r} for user {user_id}")

    def list_for_user(self, user_id: int) -> List[SkillRef]:
        try:
            stmt = select(SkillModel).where(SkillModel.user_id == user_id).order_by(SkillModel.id)
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"list skills for user {user_id}")

    def update(
        self,
        user_id: int,
        skill_id: int,
        name: Optional[str] = None,
        level: Optional[str] = None,
    ) -> SkillRef:
        """Change the name and/or level of a skill owned by the user.

        Raises:
            RecordNotFoundError: If the skill does not exist or belongs to another user
            DataIntegrityError: If the new name collides with another of the user's skills
        """
        try:
            model = self._get_owned(user_id, skill_id)
            if name is not None:
                model.name = name
            if level is not None:
                model.level = level
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"update skill {skill_id} for user {user_id}")

    def delete(self, user_id: int, skill_id: int) -> None:
        """Raises RecordNotFoundError if the skill is absent or not the user's."""
        try:
            model = self._get_owned(user_id, skill_id)
            self.session.delete(model)
            self.session.flush()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"delete skill {skill_id} for user {user_id}")

    def _get_owned(self, user_id: int, skill_id: int) -> SkillModel:
        stmt = select(SkillModel).where(SkillModel.id == skill_id, SkillModel.user_id == user_id)
        model = self.session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise RecordNotFoundError(f"Skill {skill_id} not found")
        return model


class JobRepository:
    """Repository for job listings joined with their company."""

    def __init__(self, session: Session):
        self.session = session

    def _select_jobs(self):
        return select(JobModel).options(joinedload(JobModel.company))

    def create(
        self,
        title: str,
        created_at: datetime,
        description: str = "",
        requirements: Optional[str] = None,
        company_id: Optional[int] = None,
        status: JobStatus = JobStatus.PENDING,
        location: Optional[str] = None,
        salary: Optional[str] = None,
        employment_type: Optional[str] = None,
        deadline: Optional[datetime] = None,
    ) -> JobWithCompany:
        try:
            model = JobModel(
                title=title,
                description=description,
                requirements=requirements,
                company_id=company_id,
                status=JobStatus(status).value,
                location=location,
                salary=salary,
                employment_type=employment_type,
                deadline=format_db_timestamp(deadline),
                created_at=format_db_timestamp(created_at),
            )
            self.session.add(model)
            self.session.flush()
            self.session.refresh(model)
            return model.to_domain()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"create job {title!r}")

    def get_by_id(self, job_id: int) -> Optional[JobWithCompany]:
        try:
            stmt = self._select_jobs().where(JobModel.id == job_id)
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"retrieve job {job_id}")

    def get_approved(self, job_id: int) -> Optional[JobWithCompany]:
        """Return the job only if it exists and is approved."""
        try:
            stmt = self._select_jobs().where(
                JobModel.id == job_id, JobModel.status == JobStatus.APPROVED.value
            )
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"retrieve approved job {job_id}")

    def list_approved(self) -> List[JobWithCompany]:
        """All approved jobs, oldest first."""
        try:
            stmt = (
                self._select_jobs()
                .where(JobModel.status == JobStatus.APPROVED.value)
                .order_by(JobModel.created_at.asc(), JobModel.id.asc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            _raise_persistence_error(e, "list approved jobs")

    def list_approved_since(self, cutoff: datetime) -> List[JobWithCompany]:
        """Approved jobs with created_at >= cutoff, oldest first."""
        try:
            stmt = (
                self._select_jobs()
                .where(
                    JobModel.status == JobStatus.APPROVED.value,
                    JobModel.created_at >= format_db_timestamp(cutoff),
                )
                .order_by(JobModel.created_at.asc(), JobModel.id.asc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            _raise_persistence_error(e, "list recent approved jobs")

    def update_status(self, job_id: int, status: JobStatus) -> None:
        """Set the moderation status of a job.

        Raises:
            RecordNotFoundError: If the job does not exist
        """
        try:
            stmt = update(JobModel).where(JobModel.id == job_id).values(status=JobStatus(status).value)
            result = self.session.execute(stmt)
            if result.rowcount == 0:
                raise RecordNotFoundError(f"Job with id {job_id} not found")
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"update status of job {job_id}")


class NotificationRepository:
    """Repository for the per-user notification mailbox."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, notification: Notification) -> Notification:
        try:
            model = NotificationModel.from_domain(notification)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            _raise_persistence_error(
                e, f"create notification for user {notification.user_id}, job {notification.job_id}"
            )

    def exists_for_pair(
        self,
        user_id: int,
        job_id: int,
        notification_type: NotificationType = NotificationType.JOB_MATCH,
    ) -> bool:
        """Check whether a notification of this type already exists for (user, job)."""
        try:
            stmt = (
                select(NotificationModel.id)
                .where(
                    NotificationModel.user_id == user_id,
                    NotificationModel.job_id == job_id,
                    NotificationModel.type == notification_type.value,
                )
                .limit(1)
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"check notification for user {user_id}, job {job_id}")

    def list_for_user(
        self, user_id: int, limit: int, offset: int
    ) -> Tuple[List[Notification], int]:
        """Return one page of a user's notifications (newest first) and the total count."""
        try:
            total = self.session.execute(
                select(func.count())
                .select_from(NotificationModel)
                .where(NotificationModel.user_id == user_id)
            ).scalar_one()

            stmt = (
                select(NotificationModel)
                .where(NotificationModel.user_id == user_id)
                .options(joinedload(NotificationModel.job).joinedload(JobModel.company))
                .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
                .limit(limit)
                .offset(offset)
            )
            models = self.session.execute(stmt).scalars().all()
            return [model.to_domain(include_job=True) for model in models], total
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"list notifications for user {user_id}")

    def list_for_pair(self, user_id: int, job_id: int) -> List[Notification]:
        try:
            stmt = (
                select(NotificationModel)
                .where(NotificationModel.user_id == user_id, NotificationModel.job_id == job_id)
                .order_by(NotificationModel.id)
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"list notifications for user {user_id}, job {job_id}")

    def mark_read(self, user_id: int, notification_id: int) -> Notification:
        """Mark one of the user's notifications as read.

        Raises:
            RecordNotFoundError: If it does not exist or belongs to another user
        """
        try:
            model = self._get_owned(user_id, notification_id)
            model.is_read = True
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"mark notification {notification_id} as read")

    def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of the user as read; returns rows updated."""
        try:
            stmt = (
                update(NotificationModel)
                .where(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
                .values(is_read=True)
            )
            return self.session.execute(stmt).rowcount
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"mark all notifications read for user {user_id}")

    def count_unread(self, user_id: int) -> int:
        try:
            stmt = (
                select(func.count())
                .select_from(NotificationModel)
                .where(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
            )
            return self.session.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"count unread notifications for user {user_id}")

    def delete(self, user_id: int, notification_id: int) -> None:
        """Delete one of the user's notifications.

        Raises:
            RecordNotFoundError: If it does not exist or belongs to another user
        """
        try:
            model = self._get_owned(user_id, notification_id)
            self.session.delete(model)
            self.session.flush()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"delete notification {notification_id}")

    def delete_all_for_user(self, user_id: int) -> int:
        try:
            stmt = delete(NotificationModel).where(NotificationModel.user_id == user_id)
            return self.session.execute(stmt).rowcount
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"delete notifications for user {user_id}")

    def delete_older_than(self, cutoff: datetime) -> int:
        """Delete notifications created strictly before cutoff; returns the count."""
        try:
            stmt = delete(NotificationModel).where(
                NotificationModel.created_at < format_db_timestamp(cutoff)
            )
            return self.session.execute(stmt).rowcount
        except SQLAlchemyError as e:
            _raise_persistence_error(e, "delete aged notifications")

    def _get_owned(self, user_id: int, notification_id: int) -> NotificationModel:
        stmt = select(NotificationModel).where(
            NotificationModel.id == notification_id, NotificationModel.user_id == user_id
        )
        model = self.session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise RecordNotFoundError(f"Notification {notification_id} not found")
        return model


class PasswordResetTokenRepository:
    """Repository for password-reset tokens (expiry housekeeping only)."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, token: PasswordResetToken, created_at: datetime) -> PasswordResetToken:
        try:
            model = PasswordResetTokenModel(
                token_hash=token.token_hash,
                user_id=token.user_id,
                expires=format_db_timestamp(token.expires),
                used=token.used,
                created_at=format_db_timestamp(created_at),
            )
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            _raise_persistence_error(e, f"create reset token for user {token.user_id}")

    def get_by_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        try:
            stmt = select(PasswordResetTokenModel).where(
                PasswordResetTokenModel.token_hash == token_hash
            )
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            _raise_persistence_error(e, "retrieve reset token")

    def delete_expired(self, now: datetime) -> int:
        """Delete tokens whose expiry is strictly before now, used or not."""
        try:
            stmt = delete(PasswordResetTokenModel).where(
                PasswordResetTokenModel.expires < format_db_timestamp(now)
            )
            return self.session.execute(stmt).rowcount
        except SQLAlchemyError as e:
            _raise_persistence_error(e, "delete expired reset tokens")
