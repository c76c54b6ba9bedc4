"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models and their conversion to domain
models. Timestamps are stored as fixed-width ISO 8601 strings (see
jobportal.utils.timestamps) so range filters compare correctly as text.

Only the tables the matching, notification and retention core reads or writes
are modelled here.
"""

import logging
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship

from jobportal.domain.models import (
    CompanyRef,
    JobWithCompany,
    Notification,
    PasswordResetToken,
    SkillRef,
    UserWithSkills,
)
from jobportal.utils.timestamps import format_db_timestamp, parse_db_timestamp

logger = logging.getLogger(__name__)

Base = declarative_base()


class CompanyModel(Base):
    """ORM model for the companies table."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    created_at = Column(String(50), nullable=False)

    def to_domain(self) -> CompanyRef:
        return CompanyRef(id=self.id, name=self.name)


class UserModel(Base):
    """ORM model for the users table (profile fields used by matching only)."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    created_at = Column(String(50), nullable=False)

    skills = relationship(
        "SkillModel",
        back_populates="user",
        order_by="SkillModel.id",
        cascade="all, delete-orphan",
    )

    def to_domain(self) -> UserWithSkills:
        return UserWithSkills(
            id=self.id,
            username=self.username,
            skills=[skill.to_domain() for skill in self.skills],
        )


class SkillModel(Base):
    """ORM model for the skills table. Names are unique per user."""

    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    level = Column(String(20), nullable=False, default="Intermediate")
    created_at = Column(String(50), nullable=False)

    user = relationship("UserModel", back_populates="skills")

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_skills_user_name"),)

    def to_domain(self) -> SkillRef:
        return SkillRef(id=self.id, name=self.name, level=self.level)


class JobModel(Base):
    """ORM model for the jobs table."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    requirements = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    location = Column(String(255), nullable=True)
    salary = Column(String(100), nullable=True)
    employment_type = Column(String(50), nullable=True)
    deadline = Column(String(50), nullable=True)
    created_at = Column(String(50), nullable=False)

    company = relationship("CompanyModel")

    __table_args__ = (Index("idx_jobs_status_created", "status", "created_at"),)

    def to_domain(self) -> JobWithCompany:
        return JobWithCompany(
            id=self.id,
            title=self.title,
            description=self.description or "",
            requirements=self.requirements,
            status=self.status,
            created_at=parse_db_timestamp(self.created_at),
            company=self.company.to_domain() if self.company is not None else None,
            location=self.location,
            salary=self.salary,
            employment_type=self.employment_type,
            deadline=parse_db_timestamp(self.deadline),
        )


class NotificationModel(Base):
    """ORM model for the notifications table.

    There is deliberately no unique constraint on (user_id, job_id): the
    notifier checks for an existing job_match row before inserting.
    """

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(32), nullable=False, default="job_match")
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    match_score = Column(Float, nullable=True)
    match_percentage = Column(Float, nullable=True)
    matched_skills = Column(JSON, nullable=True)
    created_at = Column(String(50), nullable=False)

    job = relationship("JobModel")

    __table_args__ = (
        Index("idx_notifications_user_job", "user_id", "job_id"),
        Index("idx_notifications_user_read", "user_id", "is_read"),
        Index("idx_notifications_created", "created_at"),
    )

    def to_domain(self, include_job: bool = False) -> Notification:
        job_title: Optional[str] = None
        company_name: Optional[str] = None
        if include_job and self.job is not None:
            job_title = self.job.title
            company_name = self.job.company.name if self.job.company is not None else None

        return Notification(
            id=self.id,
            user_id=self.user_id,
            job_id=self.job_id,
            type=self.type,
            title=self.title,
            message=self.message,
            is_read=bool(self.is_read),
            match_score=self.match_score,
            match_percentage=self.match_percentage,
            matched_skills=list(self.matched_skills or []),
            created_at=parse_db_timestamp(self.created_at),
            job_title=job_title,
            company_name=company_name,
        )

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationModel":
        return cls(
            user_id=notification.user_id,
            job_id=notification.job_id,
            type=notification.type.value,
            title=notification.title,
            message=notification.message,
            is_read=notification.is_read,
            match_score=notification.match_score,
            match_percentage=notification.match_percentage,
            matched_skills=list(notification.matched_skills),
            created_at=format_db_timestamp(notification.created_at),
        )


class PasswordResetTokenModel(Base):
    """ORM model for the password_reset_tokens table."""

    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token_hash = Column(String(128), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires = Column(String(50), nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_reset_tokens_expires", "expires"),)

    def to_domain(self) -> PasswordResetToken:
        return PasswordResetToken(
            token_hash=self.token_hash,
            user_id=self.user_id,
            expires=parse_db_timestamp(self.expires),
            used=bool(self.used),
            created_at=parse_db_timestamp(self.created_at),
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes that do not exist yet (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(sorted(tables))}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
