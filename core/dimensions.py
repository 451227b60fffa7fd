"""
Working-style dimensions and their matching policies.

Each dimension is a continuous axis in [0, 100] with a neutral baseline of 50.
No direction is "better"; the matching policy decides whether two people
should sit close together (ALIGN) or far apart (COMPLEMENT) on an axis.
"""

from enum import Enum
from typing import Dict, Mapping, Optional

BASELINE = 50.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0


class Dimension(str, Enum):
    RISK_TOLERANCE = "risk_tolerance"
    DECISION_STYLE = "decision_style"
    PACE = "pace"
    CONFLICT_APPROACH = "conflict_approach"
    ROLE_GRAVITY = "role_gravity"
    COMMUNICATION = "communication"


# Stable order used for vectors and storage columns
DIMENSIONS = tuple(Dimension)


class DimensionPolicy(str, Enum):
    ALIGN = "align"
    COMPLEMENT = "complement"


DEFAULT_POLICIES: Dict[Dimension, DimensionPolicy] = {
    Dimension.PACE: DimensionPolicy.ALIGN,
    Dimension.CONFLICT_APPROACH: DimensionPolicy.ALIGN,
    Dimension.COMMUNICATION: DimensionPolicy.ALIGN,
    # visionary vs. executor, gut vs. data, bold vs. careful
    Dimension.ROLE_GRAVITY: DimensionPolicy.COMPLEMENT,
    Dimension.DECISION_STYLE: DimensionPolicy.COMPLEMENT,
    Dimension.RISK_TOLERANCE: DimensionPolicy.COMPLEMENT,
}


def parse_dimension(value: object) -> Optional[Dimension]:
    """Return the Dimension for a key, or None when it is not one of the six axes."""
    if isinstance(value, Dimension):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Dimension(value.strip().lower())
    except ValueError:
        return None


def resolve_policies(overrides: Optional[Mapping[str, str]] = None) -> Dict[Dimension, DimensionPolicy]:
    """Merge configured overrides onto the default policy table.

    Raises:
        ValueError: if an override names an unknown dimension or policy.
    """
    policies = dict(DEFAULT_POLICIES)
    for key, policy in (overrides or {}).items():
        dimension = parse_dimension(key)
        if dimension is None:
            raise ValueError(f"Unknown dimension in policy overrides: {key}")
        policies[dimension] = DimensionPolicy(policy)
    return policies


def clamp(value: float, low: float = MIN_SCORE, high: float = MAX_SCORE) -> float:
    return max(low, min(high, value))

