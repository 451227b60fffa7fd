#!/usr/bin/env python3
"""
Tests for session scoring and profile blending.
"""

import unittest
from datetime import datetime, timezone

from core.assessment.models import ProfileState, QuizQuestion, ResponseInput
from core.assessment.scoring import blend, score_session
from core.dimensions import DIMENSIONS, Dimension

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def question(qid, dimension, a=None, b=None) -> QuizQuestion:
    return QuizQuestion(
        id=qid,
        dimension=dimension,
        option_a_text="A",
        option_b_text="B",
        option_a_deltas=a or {},
        option_b_deltas=b or {},
    )


def scores_with(**overrides):
    scores = {d: 50.0 for d in DIMENSIONS}
    for key, value in overrides.items():
        scores[Dimension(key)] = value
    return scores


class TestScoreSession(unittest.TestCase):

    def setUp(self):
        self.questions = {
            "pace-1": question("pace-1", Dimension.PACE, a={Dimension.PACE: 8}, b={Dimension.PACE: -8}),
            "pace-2": question(
                "pace-2", Dimension.PACE,
                a={Dimension.PACE: 6, Dimension.COMMUNICATION: 2},
                b={Dimension.PACE: -6},
            ),
            "risk-1": question(
                "risk-1", Dimension.RISK_TOLERANCE,
                a={Dimension.RISK_TOLERANCE: 7}, b={Dimension.RISK_TOLERANCE: -7},
            ),
        }

    def test_deltas_accumulate_on_baseline(self):
        scores = score_session(self.questions, [
            ResponseInput("pace-1", "A"),
            ResponseInput("pace-2", "A"),
            ResponseInput("risk-1", "B"),
        ])

        self.assertEqual(scores[Dimension.PACE], 64.0)
        self.assertEqual(scores[Dimension.COMMUNICATION], 52.0)
        self.assertEqual(scores[Dimension.RISK_TOLERANCE], 43.0)
        self.assertEqual(scores[Dimension.ROLE_GRAVITY], 50.0)

    def test_every_dimension_present_without_answers(self):
        self.assertEqual(score_session(self.questions, []), scores_with())

    def test_scores_are_clamped(self):
        questions = {
            f"q{i}": question(f"q{i}", Dimension.PACE, a={Dimension.PACE: 20}, b={Dimension.PACE: -20})
            for i in range(4)
        }

        high = score_session(questions, [ResponseInput(qid, "A") for qid in questions])
        low = score_session(questions, [ResponseInput(qid, "B") for qid in questions])

        self.assertEqual(high[Dimension.PACE], 100.0)
        self.assertEqual(low[Dimension.PACE], 0.0)

    def test_unknown_question_is_skipped(self):
        scores = score_session(self.questions, [
            ResponseInput("pace-1", "A"),
            ResponseInput("missing", "A"),
        ])

        self.assertEqual(scores[Dimension.PACE], 58.0)

    def test_invalid_option_is_skipped(self):
        scores = score_session(self.questions, [ResponseInput("pace-1", "C")])

        self.assertEqual(scores[Dimension.PACE], 50.0)


class TestBlend(unittest.TestCase):

    def test_first_session_is_taken_as_is(self):
        profile = blend(None, scores_with(pace=70.0), NOW)

        self.assertEqual(profile.scores[Dimension.PACE], 70.0)
        self.assertEqual(profile.scores[Dimension.COMMUNICATION], 50.0)
        self.assertEqual(profile.sessions_count, 1)
        self.assertAlmostEqual(profile.confidence, 0.5)
        self.assertEqual(profile.last_assessed_at, NOW)
        self.assertEqual(profile.next_refresh_at, datetime(2026, 6, 2, 9, 0, tzinfo=timezone.utc))

    def test_second_session_halves_the_weight(self):
        first = blend(None, scores_with(pace=70.0), NOW)

        second = blend(first, scores_with(pace=50.0), NOW)

        self.assertEqual(second.scores[Dimension.PACE], 60.0)
        self.assertEqual(second.sessions_count, 2)
        self.assertAlmostEqual(second.confidence, 2 / 3)
        self.assertEqual(second.next_refresh_at, datetime(2026, 9, 2, 9, 0, tzinfo=timezone.utc))

    def test_blend_equals_mean_of_all_sessions(self):
        profile = None
        for pace in (70.0, 50.0, 90.0):
            profile = blend(profile, scores_with(pace=pace), NOW)

        self.assertEqual(profile.scores[Dimension.PACE], 70.0)
        self.assertEqual(profile.sessions_count, 3)
        self.assertAlmostEqual(profile.confidence, 0.75)

    def test_confidence_grows_but_never_reaches_one(self):
        profile = None
        previous = 0.0
        for _ in range(10):
            profile = blend(profile, scores_with(), NOW)
            self.assertGreater(profile.confidence, previous)
            self.assertLess(profile.confidence, 1.0)
            previous = profile.confidence

    def test_refresh_date_respects_month_end(self):
        end_of_january = datetime(2026, 1, 31, 12, 0, tzinfo=timezone.utc)

        profile = blend(None, scores_with(), end_of_january)

        self.assertEqual(profile.next_refresh_at, datetime(2026, 4, 30, 12, 0, tzinfo=timezone.utc))

    def test_configurable_refresh_cadence(self):
        existing = ProfileState(
            scores=scores_with(),
            confidence=0.5,
            sessions_count=1,
            last_assessed_at=NOW,
            next_refresh_at=NOW,
        )

        profile = blend(existing, scores_with(), NOW, first_refresh_months=1, refresh_months=12)

        self.assertEqual(profile.next_refresh_at, datetime(2027, 3, 2, 9, 0, tzinfo=timezone.utc))

    def test_blended_scores_are_rounded_to_one_decimal(self):
        profile = None
        for pace in (50.0, 50.0, 51.0):
            profile = blend(profile, scores_with(pace=pace), NOW)

        # mean is 50.333...
        self.assertEqual(profile.scores[Dimension.PACE], 50.3)


if __name__ == '__main__':
    unittest.main()
