#!/usr/bin/env python3
"""
Question selection for a new assessment session.

Balances the session across dimensions, prefers questions the user has not
answered in earlier completed sessions, and shuffles the final list so items
from one dimension are not contiguous.
"""

import logging
import random
from typing import AbstractSet, List

from core.assessment.question_bank import QuestionBank

logger = logging.getLogger(__name__)

QUESTIONS_PER_SESSION = 20


def select_questions(
    bank: QuestionBank,
    seen_ids: AbstractSet[str],
    rng: random.Random,
    target: int = QUESTIONS_PER_SESSION
) -> List[str]:
    """Pick up to `target` distinct active question ids.

    Args:
        bank: Question catalog; only active questions are eligible
        seen_ids: Ids asked in the user's completed sessions
        rng: Random source (seeded in tests)
        target: Session length

    Returns:
        Shuffled list of unique question ids, shorter than target only when
        the active catalog is smaller than target.
    """
    grouped = bank.by_dimension(active_only=True)
    if not grouped or target <= 0:
        return []

    dimensions = sorted(grouped, key=lambda d: d.value)
    per_dimension = target // len(dimensions)

    selected: List[str] = []
    for dimension in dimensions:
        pool = sorted(q.id for q in grouped[dimension])
        unseen = [qid for qid in pool if qid not in seen_ids]
        # Too few unseen questions: draw from the whole dimension instead
        candidates = unseen if len(unseen) >= per_dimension else pool
        take = min(per_dimension, len(candidates))
        selected.extend(rng.sample(candidates, take))

    # Remainder slots, plus any slots a small dimension could not fill
    remaining = target - len(selected)
    if remaining > 0:
        chosen = set(selected)
        leftovers = sorted(q.id for q in bank.active() if q.id not in chosen)
        leftovers.sort(key=lambda qid: (qid in seen_ids, rng.random()))
        selected.extend(leftovers[:remaining])

    rng.shuffle(selected)

    logger.debug(
        f"Selected {len(selected)} questions across {len(dimensions)} dimensions "
        f"({len(seen_ids)} previously seen)"
    )
    return selected
