#!/usr/bin/env python3
"""
Skill and Industry Scoring - what the other person brings.

Skill complementarity and industry overlap are separate signals:
complementarity measures whether the other user fills roles or skills this
user lacks, overlap measures whether both care about the same markets.
"""

from typing import Dict, List, Tuple
import logging
import math

from core.config_loader import ScorerConfig
from core.scorer.models import SkillMatch, UserSnapshot
from core.utils import round_half_up

logger = logging.getLogger(__name__)

# Stated role -> skill categories that can fill it when no skill name matches
ROLE_CATEGORIES: Dict[str, List[str]] = {
    "cto": ["technical"],
    "developer": ["technical"],
    "engineer": ["technical"],
    "designer": ["creative"],
    "marketing": ["business", "creative"],
    "sales": ["business"],
    "operations": ["operations"],
    "finance": ["business"],
    "ceo": ["business"],
    "cfo": ["business"],
    "product": ["business", "technical"],
}

# Share of industry points when either side has not listed industries
UNKNOWN_INDUSTRY_CREDIT = 0.3


def complementary_skills(me: UserSnapshot, them: UserSnapshot) -> List[str]:
    """Their skills that I do not have, by case-insensitive name."""
    mine = {s.name.lower() for s in me.skills}
    return [s.name for s in them.skills if s.name.lower() not in mine]


def complementarity_ratio(
    me: UserSnapshot,
    them: UserSnapshot,
    config: ScorerConfig
) -> Tuple[float, List[SkillMatch], List[str]]:
    """
    How well `them` fills what `me` needs, in [0, 1].

    With stated roles: each role is matched against their skill names
    (substring either way), then against the skill categories that can fill
    it. Verified skill matches count `verified_bonus` times.

    Without stated roles: the share of their skills that I lack.

    Returns:
        (ratio, role matches, complementary skill names)
    """
    lacking = complementary_skills(me, them)
    roles = [r for r in me.roles_looking_for if r and r.strip()]

    if not roles:
        if not them.skills:
            return 0.0, [], lacking
        return len(lacking) / len(them.skills), [], lacking

    their_categories = {s.category.lower() for s in them.skills}
    matches: List[SkillMatch] = []
    matched_weight = 0.0

    for role in roles:
        role_lower = role.strip().lower()
        match = None

        for skill in them.skills:
            name = skill.name.lower()
            if name in role_lower or role_lower in name:
                match = SkillMatch(needed=role, matched=skill.name, verified=skill.verified)
                break

        if match is None:
            for category in ROLE_CATEGORIES.get(role_lower, []):
                if category in their_categories:
                    match = SkillMatch(needed=role, matched=f"{category} skills", verified=False)
                    break

        if match is not None:
            matched_weight += config.verified_bonus if match.verified else 1.0
            matches.append(match)

    ratio = min(matched_weight / len(roles), 1.0)
    return ratio, matches, lacking


def score_skill_complementarity(
    me: UserSnapshot,
    them: UserSnapshot,
    config: ScorerConfig
) -> Tuple[float, List[SkillMatch], List[str]]:
    ratio, matches, lacking = complementarity_ratio(me, them, config)
    return round_half_up(ratio * config.weights.skill, 1), matches, lacking


def score_industry_overlap(
    me: UserSnapshot,
    them: UserSnapshot,
    config: ScorerConfig
) -> Tuple[float, List[str]]:
    """
    Industry points from `me`'s point of view.

    One shared industry earns 60%, rising to 100% once half of my
    industries are shared. No overlap earns nothing.
    """
    max_points = config.weights.industry
    if not me.industries or not them.industries:
        return round_half_up(max_points * UNKNOWN_INDUSTRY_CREDIT, 1), []

    mine = {i.lower() for i in me.industries}
    shared = [i for i in them.industries if i.lower() in mine]
    if not shared:
        return 0.0, []

    ratio = min(len(shared) / max(len(me.industries), 1), 1.0)
    points = (0.6 + 0.4 * min(ratio * 2, 1.0)) * max_points
    return round_half_up(points, 1), shared


def score_mutual_demand(
    me: UserSnapshot,
    them: UserSnapshot,
    config: ScorerConfig
) -> float:
    """Geometric mean of both directions' complementarity; one-sided need scores low."""
    i_need_them, _, _ = complementarity_ratio(me, them, config)
    they_need_me, _, _ = complementarity_ratio(them, me, config)
    balance = math.sqrt(i_need_them * they_need_me)
    return round_half_up(balance * config.weights.mutual_demand, 1)
