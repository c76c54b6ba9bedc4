"""Personalized job suggestions ranked by skill match."""

import math
from dataclasses import dataclass, field
from typing import Callable, ContextManager, List, Optional

from sqlalchemy.orm import Session

from jobportal.config.models import MatchingConfig
from jobportal.domain.models import JobWithCompany, Pagination
from jobportal.logging import get_logger
from jobportal.persistence.database import get_session
from jobportal.persistence.exceptions import RecordNotFoundError
from jobportal.persistence.repositories import JobRepository, UserRepository

from .engine import SkillMatcher
from .models import MatchResult

logger = get_logger(__name__, component="suggestions")

NO_SKILLS_MESSAGE = "Please add your skills to get personalized job suggestions"


class NoSkillsError(Exception):
    """Raised when suggestions are requested for a user without skills."""

    def __init__(self, message: str = NO_SKILLS_MESSAGE, action: str = "add_skills"):
        super().__init__(message)
        self.message = message
        self.action = action


@dataclass
class SuggestedJob:
    job: JobWithCompany
    match: MatchResult


@dataclass
class SuggestionSummary:
    total_relevant_jobs: int
    user_skills_count: int
    average_match_percentage: int


@dataclass
class PersonalizedJobs:
    """One page of suggestions plus summary statistics over all relevant jobs."""

    jobs: List[SuggestedJob] = field(default_factory=list)
    pagination: Optional[Pagination] = None
    summary: Optional[SuggestionSummary] = None


class SuggestionService:
    """Ranks every approved job for a user by match score."""

    def __init__(
        self,
        matcher: Optional[SkillMatcher] = None,
        config: Optional[MatchingConfig] = None,
        session_scope: Callable[[], ContextManager[Session]] = get_session,
    ):
        self.config = config or MatchingConfig()
        self.matcher = matcher or SkillMatcher(self.config)
        self.session_scope = session_scope

    def suggest(self, user_id: int, page: int = 1, limit: Optional[int] = None) -> PersonalizedJobs:
        """Return approved jobs with a positive score, best first.

        Ties keep the store's order (oldest approved job first).

        Raises:
            RecordNotFoundError: If the user does not exist
            NoSkillsError: If the user has no skills
        """
        page = page if page and page >= 1 else 1
        limit = limit if limit and limit >= 1 else self.config.suggestions_page_size

        with self.session_scope() as session:
            user = UserRepository(session).get_with_skills(user_id)
            if user is None:
                raise RecordNotFoundError(f"User with id {user_id} not found")
            if not user.has_skills:
                raise NoSkillsError()
            jobs = JobRepository(session).list_approved()

        scored = []
        for job in jobs:
            match = self.matcher.score(user.skills, job)
            if match.is_relevant:
                scored.append(SuggestedJob(job=job, match=match))
        scored.sort(key=lambda item: item.match.match_score, reverse=True)

        total = len(scored)
        average = (
            _round_half_up(sum(item.match.match_percentage for item in scored) / total)
            if total
            else 0
        )
        offset = (page - 1) * limit

        logger.info(
            f"Built {total} suggestions for user {user_id}",
            extra={
                "event": "suggestions.built",
                "user_id": user_id,
                "total_relevant_jobs": total,
                "jobs_considered": len(jobs),
            },
        )

        return PersonalizedJobs(
            jobs=scored[offset : offset + limit],
            pagination=Pagination.build(page=page, per_page=limit, total_items=total),
            summary=SuggestionSummary(
                total_relevant_jobs=total,
                user_skills_count=len(user.skills),
                average_match_percentage=average,
            ),
        )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
