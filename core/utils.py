import math
import random
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from core.errors import ValidationError

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from backends without tz support (SQLite)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like Math.round(x * 10) / 10 rather than Python's banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def default_rng() -> random.Random:
    """Fresh, OS-seeded generator. Tests pass random.Random(seed) instead."""
    return random.Random()


def parse_uuid(value: Any, label: str = "id") -> uuid.UUID:
    """Coerce a client-supplied id to UUID.

    Raises:
        ValidationError: if the value is missing or malformed.
    """
    if isinstance(value, uuid.UUID):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError(f"Missing {label}")
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"Malformed {label}: {value}")
