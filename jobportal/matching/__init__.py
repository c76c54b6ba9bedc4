"""Skill matching and personalized suggestions.

This module provides:
- SkillMatcher: weighted substring scoring of skills against a job
- MatchResult: score, matched skills and percentage
- SuggestionService: approved jobs ranked for one user
"""

from .engine import SkillMatcher, normalize_skills
from .models import MatchResult
from .suggestions import (
    NoSkillsError,
    PersonalizedJobs,
    SuggestedJob,
    SuggestionService,
    SuggestionSummary,
)

__all__ = [
    "SkillMatcher",
    "MatchResult",
    "normalize_skills",
    "SuggestionService",
    "NoSkillsError",
    "PersonalizedJobs",
    "SuggestedJob",
    "SuggestionSummary",
]
