#!/usr/bin/env python3
"""
Test suite for the bidirectional CompatibilityScorer.
"""

import unittest

from core.config_loader import ScorerConfig, ScoreWeights
from core.dimensions import DIMENSIONS, Dimension
from core.scorer import (
    CompatibilityScorer,
    MATCH_THRESHOLD,
    SkillEntry,
    UserSnapshot,
    WorkingStyleVector,
    compute_bidirectional_score,
)


def founder(**overrides) -> UserSnapshot:
    fields = dict(
        id="founder",
        skills=[SkillEntry("Marketing", "business")],
        roles_looking_for=["cto"],
        industries=["fintech"],
        is_remote=True,
        timezone="America/New_York",
        availability="full-time",
    )
    fields.update(overrides)
    return UserSnapshot(**fields)


def engineer(**overrides) -> UserSnapshot:
    fields = dict(
        id="engineer",
        skills=[SkillEntry("Python", "technical")],
        roles_looking_for=["marketing"],
        industries=["fintech"],
        is_remote=True,
        timezone="EST",
        availability="full-time",
    )
    fields.update(overrides)
    return UserSnapshot(**fields)


class TestCompatibilityScorer(unittest.TestCase):

    def setUp(self):
        self.scorer = CompatibilityScorer()

    def test_strong_pair(self):
        result = self.scorer.score(founder(), engineer())

        self.assertEqual(result.score, 85.0)
        breakdown = result.breakdown_a
        self.assertEqual(breakdown.skill_complementarity, 35.0)
        self.assertEqual(breakdown.working_style_compat, 10.0)
        self.assertEqual(breakdown.industry_overlap, 15.0)
        self.assertEqual(breakdown.logistics_compat, 15.0)
        self.assertEqual(breakdown.mutual_demand, 10.0)
        self.assertEqual(breakdown.shared_industries, ["fintech"])
        self.assertEqual(breakdown.complementary_skills, ["Python"])

    def test_score_is_symmetric(self):
        a = founder(industries=["fintech", "climate"], working_style=WorkingStyleVector(
            scores={d: 30.0 for d in DIMENSIONS}, confidence=0.5))
        b = engineer(timezone="Europe/London", working_style=WorkingStyleVector(
            scores={d: 80.0 for d in DIMENSIONS}, confidence=0.75))

        forward = self.scorer.score(a, b)
        backward = self.scorer.score(b, a)

        self.assertEqual(forward.score, backward.score)
        self.assertEqual(forward.breakdown_a.to_dict(), backward.breakdown_b.to_dict())

    def test_score_is_the_lower_perspective(self):
        # The engineer's role need is unmet, the founder's is met
        a = founder()
        b = engineer(roles_looking_for=["designer"])

        result = self.scorer.score(a, b)

        self.assertLess(result.breakdown_b.total, result.breakdown_a.total)
        self.assertEqual(result.score, result.breakdown_b.total)

    def test_total_is_sum_of_parts(self):
        result = self.scorer.score(founder(industries=[]), engineer(timezone="Asia/Tokyo"))

        for breakdown in (result.breakdown_a, result.breakdown_b):
            parts = (
                breakdown.skill_complementarity + breakdown.working_style_compat
                + breakdown.industry_overlap + breakdown.logistics_compat + breakdown.mutual_demand
            )
            self.assertAlmostEqual(breakdown.total, parts, places=6)
            self.assertLessEqual(breakdown.total, 100.0)

    def test_custom_weights(self):
        config = ScorerConfig(weights=ScoreWeights(skill=50, working_style=10, industry=10, logistics=20, mutual_demand=10))

        result = compute_bidirectional_score(founder(), engineer(), config)

        self.assertEqual(result.breakdown_a.skill_complementarity, 50.0)
        self.assertEqual(result.breakdown_a.working_style_compat, 4.0)
        self.assertEqual(result.score, 94.0)

    def test_compatibility_blob_per_owner(self):
        result = self.scorer.score(founder(), engineer(roles_looking_for=["designer"]))

        owned_by_a = result.compatibility_for(a_is_owner=True)
        owned_by_b = result.compatibility_for(a_is_owner=False)

        self.assertEqual(owned_by_a['breakdown_of_user'], result.breakdown_a.to_dict())
        self.assertEqual(owned_by_b['breakdown_of_user'], result.breakdown_b.to_dict())
        self.assertEqual(owned_by_a['breakdown_of_candidate'], owned_by_b['breakdown_of_user'])
        self.assertEqual(owned_by_a['score'], owned_by_b['score'])

    def test_breakdown_serialises_details(self):
        data = self.scorer.compute_match_score(founder(), engineer()).to_dict()

        self.assertEqual(data['skill_details'], [{'needed': 'cto', 'matched': 'technical skills', 'verified': False}])
        self.assertIn(Dimension.PACE.value, data['working_style_details']['dimensions'])

    def test_invalid_policy_override_fails_fast(self):
        with self.assertRaises(ValueError):
            CompatibilityScorer(ScorerConfig(dimension_policies={"pace": "opposite"}))

    def test_default_threshold(self):
        self.assertEqual(MATCH_THRESHOLD, 40.0)


if __name__ == '__main__':
    unittest.main()
