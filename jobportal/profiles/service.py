"""User skill profile management.

Adding skills changes which jobs a user matches, so every successful add
schedules a notification fan-out for that user.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, ContextManager, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from jobportal.domain.models import SkillLevel, SkillRef, normalize_skill_name
from jobportal.logging import get_logger
from jobportal.notifications.triggers import MatchTriggers
from jobportal.persistence.database import get_session
from jobportal.persistence.exceptions import DataIntegrityError
from jobportal.persistence.repositories import SkillRepository
from jobportal.utils.timestamps import utc_now

logger = get_logger(__name__, component="profiles")


class SkillError(Exception):
    """Base exception for skill profile errors."""

    pass


class InvalidSkillError(SkillError):
    """Raised for an empty skill name, an unknown level or an empty batch."""

    pass


class DuplicateSkillError(SkillError):
    """Raised when the user already has a skill with the same normalized name."""

    pass


@dataclass
class BulkSkillResult:
    added: List[SkillRef] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class SkillService:
    """Manages the skill set on a user's profile."""

    def __init__(
        self,
        triggers: Optional[MatchTriggers] = None,
        session_scope: Callable[[], ContextManager[Session]] = get_session,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.triggers = triggers
        self.session_scope = session_scope
        self.clock = clock

    def add_skill(self, user_id: int, name: str, level: Optional[str] = None) -> SkillRef:
        """Add one skill and schedule a fan-out for the user.

        Raises:
            InvalidSkillError: If the name is empty or the level unknown
            DuplicateSkillError: If the user already has this skill
        """
        skill = self._store(user_id, name, level)
        self._fire(user_id)
        return skill

    def add_skills(self, user_id: int, items: Iterable[Dict[str, Optional[str]]]) -> BulkSkillResult:
        """Add several skills, collecting per-item errors.

        A single fan-out is scheduled when at least one skill was added.

        Raises:
            InvalidSkillError: If items is empty
        """
        items = list(items or [])
        if not items:
            raise InvalidSkillError("Skills array is required")

        result = BulkSkillResult()
        for item in items:
            name = item.get("name") if isinstance(item, dict) else None
            try:
                result.added.append(self._store(user_id, name, item.get("level") if name else None))
            except SkillError as e:
                result.errors.append(str(e))

        logger.info(
            f"Added {len(result.added)} of {len(items)} skills for user {user_id}",
            extra={
                "event": "profiles.skills.bulk_added",
                "user_id": user_id,
                "added": len(result.added),
                "errors": len(result.errors),
            },
        )

        if result.added:
            self._fire(user_id)
        return result

    def list_skills(self, user_id: int) -> List[SkillRef]:
        with self.session_scope() as session:
            return SkillRepository(session).list_for_user(user_id)

    def update_skill(
        self,
        user_id: int,
        skill_id: int,
        name: Optional[str] = None,
        level: Optional[str] = None,
    ) -> SkillRef:
        """Rename a skill and/or change its level.

        A blank name leaves the name unchanged. A rename schedules a fan-out.

        Raises:
            RecordNotFoundError: If the skill is missing or owned by another user
            InvalidSkillError: If the level is unknown
            DuplicateSkillError: If the user already has a skill with the new name
        """
        normalized = normalize_skill_name(name) or None
        level = _validate_level(level) if level else None

        try:
            with self.session_scope() as session:
                repo = SkillRepository(session)
                if normalized is not None:
                    existing = repo.get_by_name(user_id, normalized)
                    if existing is not None and existing.id != skill_id:
                        raise DuplicateSkillError(f'Skill "{normalized}" already exists')
                skill = repo.update(user_id, skill_id, name=normalized, level=level)
        except DataIntegrityError as e:
            raise DuplicateSkillError(f'Skill "{normalized}" already exists') from e

        logger.info(
            f"Updated skill {skill_id} for user {user_id}",
            extra={"event": "profiles.skill.updated", "user_id": user_id, "skill": skill.name},
        )
        if normalized is not None:
            self._fire(user_id)
        return skill

    def delete_skill(self, user_id: int, skill_id: int) -> None:
        """Remove a skill from the user's profile.

        Raises:
            RecordNotFoundError: If the skill is missing or owned by another user
        """
        with self.session_scope() as session:
            SkillRepository(session).delete(user_id, skill_id)

        logger.info(
            f"Deleted skill {skill_id} for user {user_id}",
            extra={"event": "profiles.skill.deleted", "user_id": user_id, "skill_id": skill_id},
        )

    def _store(self, user_id: int, name: Optional[str], level: Optional[str]) -> SkillRef:
        normalized = normalize_skill_name(name)
        if not normalized:
            raise InvalidSkillError(f"Skill name is required (got {name!r})")

        skill = SkillRef(
            name=normalized, level=_validate_level(level) if level else SkillLevel.INTERMEDIATE
        )

        try:
            with self.session_scope() as session:
                repo = SkillRepository(session)
                if repo.get_by_name(user_id, normalized) is not None:
                    raise DuplicateSkillError(f'Skill "{normalized}" already exists')
                stored = repo.add(user_id, skill, created_at=self.clock())
        except DataIntegrityError as e:
            # Lost a race with a concurrent insert of the same skill
            raise DuplicateSkillError(f'Skill "{normalized}" already exists') from e

        logger.info(
            f"Added skill {normalized!r} for user {user_id}",
            extra={"event": "profiles.skill.added", "user_id": user_id, "skill": normalized},
        )
        return stored

    def _fire(self, user_id: int) -> None:
        if self.triggers is not None:
            self.triggers.skills_added(user_id)


def _validate_level(level: str) -> str:
    try:
        return SkillLevel(level).value
    except ValueError as e:
        levels = ", ".join(lvl.value for lvl in SkillLevel)
        raise InvalidSkillError(f"Invalid level {level!r}, expected one of {levels}") from e
