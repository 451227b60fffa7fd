#!/usr/bin/env python3
"""
Compatibility Scorer - bidirectional, weighted 100-point scoring.

Each user gets their own breakdown of the pairing:
- Skill complementarity: does the other user fill my role needs / bring skills I lack
- Working style: align/complement per dimension, weighted by both confidences
- Industry overlap: markets we both care about
- Logistics: remote/location, timezone, availability
- Mutual demand: do we both need what the other offers

The shared score is the lower of the two totals, so neither side is pushed
a match that only works for the other. min() is commutative, hence
score(a, b) == score(b, a) while the breakdowns stay perspective-specific.

Pure functions only; no database access.
"""

from typing import Optional
import logging

from core.config_loader import MatchingConfig, ScorerConfig
from core.dimensions import resolve_policies
from core.scorer.models import BidirectionalScore, MatchBreakdown, UserSnapshot
from core.scorer import logistics, skills, working_style
from core.utils import round_half_up

logger = logging.getLogger(__name__)

# Minimum bidirectional score for a candidate to be stored as a match
MATCH_THRESHOLD = MatchingConfig().threshold


class CompatibilityScorer:
    """
    Stateless scorer configured once from ScorerConfig.

    Args:
        config: Weights, bonuses and per-dimension policy overrides

    Raises:
        ValueError: if the policy overrides name an unknown dimension or policy
    """

    def __init__(self, config: Optional[ScorerConfig] = None):
        self.config = config or ScorerConfig()
        self.policies = resolve_policies(self.config.dimension_policies)

    def compute_match_score(self, me: UserSnapshot, them: UserSnapshot) -> MatchBreakdown:
        """Score the pairing from `me`'s point of view."""
        skill_points, skill_details, lacking = skills.score_skill_complementarity(me, them, self.config)
        style_points, style_details = working_style.score_working_style(
            me.working_style, them.working_style, self.policies, self.config
        )
        industry_points, shared = skills.score_industry_overlap(me, them, self.config)
        logistics_points = logistics.score_logistics(me, them, self.config)
        mutual_points = skills.score_mutual_demand(me, them, self.config)

        total = round_half_up(
            skill_points + style_points + industry_points + logistics_points + mutual_points, 1
        )

        return MatchBreakdown(
            skill_complementarity=skill_points,
            working_style_compat=style_points,
            industry_overlap=industry_points,
            logistics_compat=logistics_points,
            mutual_demand=mutual_points,
            total=max(0.0, min(total, 100.0)),
            skill_details=skill_details,
            complementary_skills=lacking,
            shared_industries=shared,
            working_style_details=style_details,
        )

    def score(self, a: UserSnapshot, b: UserSnapshot) -> BidirectionalScore:
        breakdown_a = self.compute_match_score(a, b)
        breakdown_b = self.compute_match_score(b, a)
        return BidirectionalScore(
            score=min(breakdown_a.total, breakdown_b.total),
            breakdown_a=breakdown_a,
            breakdown_b=breakdown_b,
        )


def compute_bidirectional_score(
    a: UserSnapshot,
    b: UserSnapshot,
    config: Optional[ScorerConfig] = None
) -> BidirectionalScore:
    """Convenience wrapper around CompatibilityScorer(config).score(a, b)."""
    return CompatibilityScorer(config).score(a, b)
