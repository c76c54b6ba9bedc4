"""Persistence layer: engine/session management, ORM schema and repositories."""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
    SchemaNotReadyError,
)
from .repositories import (
    CompanyRepository,
    JobRepository,
    NotificationRepository,
    PasswordResetTokenRepository,
    SkillRepository,
    UserRepository,
)

__all__ = [
    "init_database",
    "get_session",
    "get_engine",
    "close_database",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
    "SchemaNotReadyError",
    "CompanyRepository",
    "UserRepository",
    "SkillRepository",
    "JobRepository",
    "NotificationRepository",
    "PasswordResetTokenRepository",
]
