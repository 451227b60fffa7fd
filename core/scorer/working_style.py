#!/usr/bin/env python3
"""
Working-Style Compatibility - per-dimension align/complement scoring.

Each dimension carries a declared policy. ALIGN dimensions reward closeness
(1 - diff/100). COMPLEMENT dimensions reward distance, reaching full credit
at `complement_full_distance` and never dropping below `complement_floor`.

The compatibility ratio is then weighted by the two users' confidences:
each user contributes half of the trust, scaled by their own confidence.
Whatever trust is missing falls back to the neutral `no_style_credit`, so a
user without an assessment neither helps nor sinks a pairing.
"""

from typing import Dict, Any, Mapping, Optional, Tuple
import logging

import numpy as np

from core.config_loader import ScorerConfig
from core.dimensions import DIMENSIONS, Dimension, DimensionPolicy
from core.scorer.models import WorkingStyleVector
from core.utils import round_half_up

logger = logging.getLogger(__name__)


def dimension_scores(
    mine: WorkingStyleVector,
    theirs: WorkingStyleVector,
    policies: Mapping[Dimension, DimensionPolicy],
    config: ScorerConfig
) -> np.ndarray:
    """Per-dimension sub-scores in [0, 1], in DIMENSIONS order."""
    diff = np.abs(mine.as_array() - theirs.as_array())
    complement_mask = np.array(
        [policies[d] == DimensionPolicy.COMPLEMENT for d in DIMENSIONS], dtype=bool
    )

    align = 1.0 - diff / 100.0
    normalized = np.minimum(diff / config.complement_full_distance, 1.0)
    complement = config.complement_floor + (1.0 - config.complement_floor) * normalized

    return np.clip(np.where(complement_mask, complement, align), 0.0, 1.0)


def score_working_style(
    mine: Optional[WorkingStyleVector],
    theirs: Optional[WorkingStyleVector],
    policies: Mapping[Dimension, DimensionPolicy],
    config: ScorerConfig
) -> Tuple[float, Dict[str, Any]]:
    """
    Working-style points for a pairing, from `mine`'s point of view.

    Formula: W * ((1 - w) * no_style_credit + w * compat)
    where compat is the mean per-dimension sub-score and
    w = (confidence_mine + confidence_theirs) / 2.

    The formula is symmetric in its two arguments; only the details differ
    in which side is labelled "self".

    Returns:
        (points, details)
    """
    max_points = config.weights.working_style
    mine = mine or WorkingStyleVector.neutral()
    theirs = theirs or WorkingStyleVector.neutral()

    per_dimension = dimension_scores(mine, theirs, policies, config)
    compat = float(per_dimension.mean())

    own_weight = float(np.clip(mine.confidence, 0.0, 1.0))
    other_weight = float(np.clip(theirs.confidence, 0.0, 1.0))
    trust = (own_weight + other_weight) / 2.0

    ratio = (1.0 - trust) * config.no_style_credit + trust * compat
    points = round_half_up(ratio * max_points, 1)

    details = {
        'compatibility': round(compat, 4),
        'dimensions': {
            d.value: {
                'policy': policies[d].value,
                'score': round(float(s), 4),
            }
            for d, s in zip(DIMENSIONS, per_dimension)
        },
        'contribution_weights': {'self': own_weight, 'other': other_weight},
    }
    return points, details
