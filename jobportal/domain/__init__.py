"""Domain models for the job portal core."""

from .models import (
    CompanyRef,
    JobStatus,
    JobWithCompany,
    Notification,
    NotificationPage,
    NotificationType,
    Pagination,
    PasswordResetToken,
    SkillLevel,
    SkillRef,
    UserWithSkills,
    normalize_skill_name,
)

__all__ = [
    "SkillLevel",
    "JobStatus",
    "NotificationType",
    "SkillRef",
    "UserWithSkills",
    "CompanyRef",
    "JobWithCompany",
    "Notification",
    "NotificationPage",
    "Pagination",
    "PasswordResetToken",
    "normalize_skill_name",
]
