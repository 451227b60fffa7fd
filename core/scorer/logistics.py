#!/usr/bin/env python3
"""
Logistics Compatibility - remote/location, timezone and availability.

Each of the three parts is worth a third of the logistics weight. Missing
data earns half credit rather than zero.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import re

from core.config_loader import ScorerConfig
from core.scorer.models import UserSnapshot
from core.utils import round_half_up

logger = logging.getLogger(__name__)

# Standard-time UTC offsets (hours) for common abbreviations and zone names
TIMEZONE_OFFSETS = {
    "utc": 0, "gmt": 0,
    "est": -5, "edt": -4, "cst": -6, "cdt": -5,
    "mst": -7, "mdt": -6, "pst": -8, "pdt": -7,
    "eastern": -5, "central": -6, "mountain": -7, "pacific": -8,
    "america/new_york": -5, "america/chicago": -6,
    "america/denver": -7, "america/los_angeles": -8,
    "america/toronto": -5, "america/vancouver": -8,
    "europe/london": 0, "europe/paris": 1, "europe/berlin": 1,
    "asia/tokyo": 9, "asia/shanghai": 8, "asia/kolkata": 5.5,
    "asia/dubai": 4, "australia/sydney": 11,
    "ist": 5.5, "cet": 1, "eet": 2, "jst": 9, "cst_china": 8,
    "aest": 11, "nzst": 13,
}

# Points (out of 5) for differing availabilities
AVAILABILITY_COMPAT = {
    "full-time": {"part-time": 2, "weekends": 1},
    "part-time": {"full-time": 2, "weekends": 3},
    "weekends": {"part-time": 3, "full-time": 1},
}

_OFFSET_PATTERN = re.compile(r"^(?:utc|gmt)([+-])(\d{1,2})(?::?(\d{2}))?$")
# Fixed winter reference so zone lookups do not drift with daylight saving
_REFERENCE_DATE = datetime(2024, 1, 15, 12, 0)


def parse_timezone_offset(tz: Optional[str]) -> Optional[float]:
    """UTC offset in hours for a timezone label, or None when it cannot be resolved."""
    if not tz:
        return None
    key = re.sub(r"\s+", "_", tz.strip().lower()).replace("(", "").replace(")", "")
    if key in TIMEZONE_OFFSETS:
        return float(TIMEZONE_OFFSETS[key])

    m = _OFFSET_PATTERN.match(key)
    if m:
        hours = int(m.group(2)) + int(m.group(3) or 0) / 60.0
        return hours if m.group(1) == "+" else -hours

    try:
        offset = ZoneInfo(tz.strip()).utcoffset(_REFERENCE_DATE)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError: a region directory such as "Europe" rather than a zone file
        return None
    return offset.total_seconds() / 3600.0 if offset is not None else None


def _city(location: str) -> str:
    return location.lower().split(",")[0].strip()


def score_logistics(me: UserSnapshot, them: UserSnapshot, config: ScorerConfig) -> float:
    max_points = config.weights.logistics
    part = max_points / 3.0
    score = 0.0

    # Remote / location
    if me.is_remote and them.is_remote:
        score += part
    elif me.is_remote or them.is_remote:
        score += part * 0.5
    elif me.location and them.location:
        score += part if _city(me.location) == _city(them.location) else part * 0.2
    else:
        score += part * 0.4

    # Timezone
    my_offset = parse_timezone_offset(me.timezone)
    their_offset = parse_timezone_offset(them.timezone)
    if my_offset is not None and their_offset is not None:
        hour_diff = abs(my_offset - their_offset)
        if hour_diff <= 2:
            score += part
        elif hour_diff <= 4:
            score += part * 0.7
        elif hour_diff <= 6:
            score += part * 0.4
        else:
            score += part * 0.1
    else:
        score += part * 0.5

    # Availability
    if me.availability and them.availability:
        mine, theirs = me.availability.lower(), them.availability.lower()
        if mine == theirs:
            score += part
        else:
            score += part * AVAILABILITY_COMPAT.get(mine, {}).get(theirs, 2) / 5.0
    else:
        score += part * 0.5

    return round_half_up(min(score, max_points), 1)
