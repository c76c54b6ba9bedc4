"""Weighted skill matching engine.

Scores a user's skill set against a job by substring containment in three
text fields. A skill found in the title earns the title weight; otherwise a
hit in the requirements earns the requirements weight; otherwise a hit in the
description earns the description weight. Each skill contributes once.
"""

import logging
from typing import Iterable, List, Optional, Union

from jobportal.config.models import MatchingConfig
from jobportal.domain.models import JobWithCompany, SkillRef, normalize_skill_name

from .models import MatchResult

logger = logging.getLogger(__name__)

SkillInput = Union[str, SkillRef]


def normalize_skills(skills: Iterable[SkillInput]) -> List[str]:
    """Lowercase and trim skill names, dropping empties and repeats (first wins)."""
    normalized: List[str] = []
    seen = set()
    for skill in skills:
        name = normalize_skill_name(skill.name if isinstance(skill, SkillRef) else skill)
        if name and name not in seen:
            seen.add(name)
            normalized.append(name)
    return normalized


class SkillMatcher:
    """Scores skill sets against jobs.

    The matcher is a pure function of its inputs and never raises for
    well-formed jobs, so one matcher instance can be shared across threads.
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        logger_instance: logging.Logger = None,
    ):
        """Initialize SkillMatcher.

        Args:
            config: Matching weights (defaults to MatchingConfig())
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.config = config or MatchingConfig()
        self.logger = logger_instance or logger

    def score(self, skills: Iterable[SkillInput], job: JobWithCompany) -> MatchResult:
        """Score a skill set against a job.

        Args:
            skills: Skill names or SkillRef objects, in any case and with repeats
            job: Job to evaluate

        Returns:
            MatchResult; all zero when the skill set is empty
        """
        names = normalize_skills(skills)
        if not names:
            return MatchResult()

        title = (job.title or "").lower()
        requirements = (job.requirements or "").lower()
        description = (job.description or "").lower()

        title_hits: List[str] = []
        requirement_hits: List[str] = []
        description_hits: List[str] = []
        score = 0.0

        for name in names:
            if name in title:
                title_hits.append(name)
                score += self.config.title_weight
            elif name in requirements:
                requirement_hits.append(name)
                score += self.config.requirements_weight
            elif name in description:
                description_hits.append(name)
                score += self.config.description_weight

        percentage = min(score / len(names) * 100, 100.0)

        result = MatchResult(
            match_score=score,
            matched_skills=title_hits + requirement_hits + description_hits,
            match_percentage=percentage,
        )

        self.logger.debug(
            f"Scored job {job.id}: {percentage:.1f}%",
            extra={
                "event": "matcher.scored",
                "job_id": job.id,
                "skill_count": len(names),
                "match_score": score,
                "matched_count": len(result.matched_skills),
            },
        )
        return result
