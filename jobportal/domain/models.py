"""Core domain models for the job portal core.

These are plain data objects passed between the repositories, the matcher and
the notifier, so the matching algorithm never touches ORM objects:
- SkillRef / UserWithSkills: a user and their normalized skills
- CompanyRef / JobWithCompany: an approved job listing with its employer
- Notification: one mailbox entry
- PasswordResetToken: reset token tracked for expiry sweeps
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from jobportal.utils.timestamps import ensure_utc


class SkillLevel(str, Enum):
    """Self-declared proficiency for a skill."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class JobStatus(str, Enum):
    """Moderation status of a job listing."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    """Kinds of mailbox entries."""

    JOB_MATCH = "job_match"
    APPLICATION_STATUS = "application_status"
    GENERAL = "general"


def normalize_skill_name(name: Optional[str]) -> str:
    """Trim and lowercase a skill name ("" when nothing is left)."""
    return (name or "").strip().lower()


class SkillRef(BaseModel):
    """A skill owned by a user profile."""

    id: Optional[int] = Field(None, description="Database id once stored")
    name: str = Field(..., description="Normalized lowercase skill name")
    level: SkillLevel = Field(SkillLevel.INTERMEDIATE, description="Proficiency level")

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        normalized = normalize_skill_name(v)
        if not normalized:
            raise ValueError("Skill name cannot be empty or whitespace-only")
        return normalized

    model_config = {"use_enum_values": True, "validate_default": True}


class UserWithSkills(BaseModel):
    """A user together with their current full skill set."""

    id: int
    username: str = ""
    skills: List[SkillRef] = Field(default_factory=list)

    @property
    def skill_names(self) -> List[str]:
        return [skill.name for skill in self.skills]

    @property
    def has_skills(self) -> bool:
        return bool(self.skills)


class CompanyRef(BaseModel):
    """Employer details needed for display."""

    id: int
    name: str


class JobWithCompany(BaseModel):
    """A job listing joined with its owning company."""

    id: int
    title: str
    description: str = ""
    requirements: Optional[str] = None
    status: JobStatus = JobStatus.PENDING
    created_at: datetime
    company: Optional[CompanyRef] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    employment_type: Optional[str] = None
    deadline: Optional[datetime] = None

    @field_validator("created_at", "deadline")
    @classmethod
    def validate_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def is_approved(self) -> bool:
        return self.status == JobStatus.APPROVED

    @property
    def company_name(self) -> Optional[str]:
        return self.company.name if self.company else None


class Notification(BaseModel):
    """A mailbox entry for one user."""

    id: Optional[int] = None
    user_id: int
    job_id: int
    type: NotificationType = NotificationType.JOB_MATCH
    title: str
    message: str
    is_read: bool = False
    match_score: Optional[float] = None
    match_percentage: Optional[float] = None
    matched_skills: List[str] = Field(default_factory=list)
    created_at: datetime
    # Display-only fields populated by mailbox listings
    job_title: Optional[str] = None
    company_name: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def validate_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class PasswordResetToken(BaseModel):
    """A stored password-reset token (hash only)."""

    token_hash: str
    user_id: int
    expires: datetime
    used: bool = False
    created_at: Optional[datetime] = None

    @field_validator("expires", "created_at")
    @classmethod
    def validate_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class Pagination(BaseModel):
    """Page metadata returned with every paginated listing."""

    current_page: int
    total_pages: int
    total_items: int
    per_page: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, per_page: int, total_items: int) -> "Pagination":
        total_pages = -(-total_items // per_page) if per_page else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total_items,
            per_page=per_page,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class NotificationPage(BaseModel):
    """One page of a user's mailbox, newest first."""

    notifications: List[Notification]
    pagination: Pagination
