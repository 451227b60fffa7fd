#!/usr/bin/env python3
"""
Scoring Module - Bidirectional compatibility scoring.

Public API:
- CompatibilityScorer: configured scorer producing BidirectionalScore
- compute_bidirectional_score: one-shot helper
- MATCH_THRESHOLD: default minimum score for a stored match

The scorer is split into focused modules:

- models.py: Data structures (UserSnapshot, MatchBreakdown, BidirectionalScore)
- skills.py: Skill complementarity, industry overlap, mutual demand
- working_style.py: Align/complement dimension scoring with confidence weighting
- logistics.py: Remote/location, timezone and availability
- service.py: CompatibilityScorer orchestrator
"""

from core.scorer.models import (
    SkillEntry, WorkingStyleVector, UserSnapshot, SkillMatch, MatchBreakdown, BidirectionalScore
)
from core.scorer.service import CompatibilityScorer, compute_bidirectional_score, MATCH_THRESHOLD

__all__ = [
    'CompatibilityScorer', 'compute_bidirectional_score', 'MATCH_THRESHOLD',
    'SkillEntry', 'WorkingStyleVector', 'UserSnapshot', 'SkillMatch',
    'MatchBreakdown', 'BidirectionalScore',
]
