"""User skill profiles."""

from .service import (
    BulkSkillResult,
    DuplicateSkillError,
    InvalidSkillError,
    SkillError,
    SkillService,
)

__all__ = [
    "SkillService",
    "BulkSkillResult",
    "SkillError",
    "InvalidSkillError",
    "DuplicateSkillError",
]
