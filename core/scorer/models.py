#!/usr/bin/env python3
"""
Scoring Models - Snapshots in, breakdowns out.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

import numpy as np

from core.dimensions import BASELINE, DIMENSIONS, Dimension


@dataclass(frozen=True)
class SkillEntry:
    name: str
    category: str
    proficiency: str = "intermediate"
    verified: bool = False


@dataclass(frozen=True)
class WorkingStyleVector:
    """A user's working-style scores plus how much to trust them."""
    scores: Dict[Dimension, float]
    confidence: float

    @classmethod
    def neutral(cls) -> "WorkingStyleVector":
        """Stand-in for users without a completed assessment: baseline scores, zero weight."""
        return cls(scores={dimension: BASELINE for dimension in DIMENSIONS}, confidence=0.0)

    def as_array(self) -> np.ndarray:
        return np.array([self.scores.get(d, BASELINE) for d in DIMENSIONS], dtype=float)


@dataclass(frozen=True)
class UserSnapshot:
    """Everything the scorer reads about one user."""
    id: str
    skills: List[SkillEntry] = field(default_factory=list)
    roles_looking_for: List[str] = field(default_factory=list)
    industries: List[str] = field(default_factory=list)
    location: Optional[str] = None
    timezone: Optional[str] = None
    is_remote: bool = False
    availability: Optional[str] = None
    working_style: Optional[WorkingStyleVector] = None


@dataclass
class SkillMatch:
    needed: str
    matched: str
    verified: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {'needed': self.needed, 'matched': self.matched, 'verified': self.verified}


@dataclass
class MatchBreakdown:
    """One user's view of a pairing.

    Point fields are capped by the configured weights and add up to total.
    """
    skill_complementarity: float = 0.0
    working_style_compat: float = 0.0
    industry_overlap: float = 0.0
    logistics_compat: float = 0.0
    mutual_demand: float = 0.0
    total: float = 0.0

    skill_details: List[SkillMatch] = field(default_factory=list)
    # Skills the other user has and this user lacks
    complementary_skills: List[str] = field(default_factory=list)
    shared_industries: List[str] = field(default_factory=list)
    working_style_details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'skill_complementarity': self.skill_complementarity,
            'working_style_compat': self.working_style_compat,
            'industry_overlap': self.industry_overlap,
            'logistics_compat': self.logistics_compat,
            'mutual_demand': self.mutual_demand,
            'total': self.total,
            'skill_details': [m.to_dict() for m in self.skill_details],
            'complementary_skills': list(self.complementary_skills),
            'shared_industries': list(self.shared_industries),
            'working_style_details': dict(self.working_style_details),
        }


@dataclass
class BidirectionalScore:
    score: float
    breakdown_a: MatchBreakdown
    breakdown_b: MatchBreakdown

    def compatibility_for(self, a_is_owner: bool = True) -> Dict[str, Any]:
        """Stored compatibility blob for the row owned by A (or by B)."""
        own, other = (self.breakdown_a, self.breakdown_b) if a_is_owner else (self.breakdown_b, self.breakdown_a)
        return {
            'breakdown_of_user': own.to_dict(),
            'breakdown_of_candidate': other.to_dict(),
            'score': self.score,
        }
