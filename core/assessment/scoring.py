#!/usr/bin/env python3
"""
Session scoring and profile blending.

score_session turns one session's answers into a per-dimension vector around
the 50 baseline. blend folds that vector into the stored profile as an
online equal-weight mean over every session the user has completed.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, Mapping, Optional

from dateutil.relativedelta import relativedelta

from core.assessment.models import ProfileState, QuizQuestion, ResponseInput, OPTIONS
from core.dimensions import BASELINE, DIMENSIONS, Dimension, clamp
from core.utils import round_half_up

logger = logging.getLogger(__name__)


def score_session(
    questions: Mapping[str, QuizQuestion],
    responses: Iterable[ResponseInput]
) -> Dict[Dimension, float]:
    """Accumulate option deltas onto the baseline and clamp each dimension to [0, 100].

    Responses whose question is unknown or whose option is not A/B are
    skipped; they never fail the session.
    """
    totals = {dimension: 0.0 for dimension in DIMENSIONS}

    for response in responses:
        question = questions.get(response.question_id)
        if question is None:
            logger.warning(f"Response references unknown question {response.question_id}, skipping")
            continue
        if response.selected_option not in OPTIONS:
            logger.warning(
                f"Response to {response.question_id} has invalid option "
                f"{response.selected_option!r}, skipping"
            )
            continue
        for dimension, delta in question.deltas_for(response.selected_option).items():
            totals[dimension] += delta

    return {dimension: clamp(BASELINE + total) for dimension, total in totals.items()}


def blend(
    existing: Optional[ProfileState],
    session_scores: Mapping[Dimension, float],
    now: datetime,
    first_refresh_months: int = 3,
    refresh_months: int = 6
) -> ProfileState:
    """Fold one session's scores into the running profile.

    With n sessions, the old profile keeps (n-1)/n of its weight and the
    new session gets 1/n, so the result equals the plain mean of all n
    session vectors.
    """
    sessions_count = (existing.sessions_count if existing else 0) + 1
    old_weight = (sessions_count - 1) / sessions_count if existing else 0.0
    new_weight = 1.0 / sessions_count

    scores: Dict[Dimension, float] = {}
    for dimension in DIMENSIONS:
        new_value = session_scores.get(dimension, BASELINE)
        old_value = existing.scores.get(dimension, BASELINE) if existing else 0.0
        blended = old_value * old_weight + new_value * new_weight
        scores[dimension] = clamp(round_half_up(blended, 1))

    months = first_refresh_months if sessions_count == 1 else refresh_months

    return ProfileState(
        scores=scores,
        confidence=sessions_count / (sessions_count + 1),
        sessions_count=sessions_count,
        last_assessed_at=now,
        next_refresh_at=now + relativedelta(months=months),
    )
