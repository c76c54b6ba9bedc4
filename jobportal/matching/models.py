"""Data models for the skill matching engine."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class MatchResult:
    """Result of scoring one user's skills against one job.

    Attributes:
        match_score: Sum of per-skill weights (each skill counted at most once)
        matched_skills: Normalized skill names that matched, title matches first,
            then requirements, then description
        match_percentage: Score relative to the skill count, capped to [0, 100]
    """

    match_score: float = 0.0
    matched_skills: List[str] = field(default_factory=list)
    match_percentage: float = 0.0

    def qualifies(self, threshold: float) -> bool:
        """True if the percentage reaches the notification threshold (inclusive)."""
        return self.match_percentage >= threshold

    @property
    def is_relevant(self) -> bool:
        return self.match_score > 0
