"""Result objects returned by MatchingService."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.matching.snapshots import candidate_summary
from core.utils import ensure_utc
from database.models import Match


def _iso(value: Optional[datetime]) -> Optional[str]:
    value = ensure_utc(value)
    return value.isoformat() if value else None


@dataclass
class MatchView:
    """A match row as its owner sees it."""
    match_id: str
    score: float
    status: str
    breakdown: Dict[str, Any]
    candidate: Dict[str, Any]
    expires_at: Optional[str] = None
    viewed_at: Optional[str] = None
    responded_at: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, match: Match) -> "MatchView":
        compatibility = match.compatibility or {}
        return cls(
            match_id=str(match.id),
            score=float(match.match_score),
            status=match.status,
            breakdown=compatibility.get('breakdown_of_user', {}),
            candidate=candidate_summary(match.candidate),
            expires_at=_iso(match.expires_at),
            viewed_at=_iso(match.viewed_at),
            responded_at=_iso(match.responded_at),
            created_at=_iso(match.created_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'match_id': self.match_id,
            'score': self.score,
            'status': self.status,
            'breakdown': self.breakdown,
            'candidate': self.candidate,
            'expires_at': self.expires_at,
            'viewed_at': self.viewed_at,
            'responded_at': self.responded_at,
            'created_at': self.created_at,
        }


@dataclass
class RunResult:
    """Outcome of one matching run: rows created now, plus how many candidates qualified."""
    matches: List[MatchView] = field(default_factory=list)
    total: int = 0

    @property
    def shown(self) -> int:
        return len(self.matches)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matches': [m.to_dict() for m in self.matches],
            'total': self.total,
            'shown': self.shown,
        }


@dataclass
class RespondResult:
    status: str
    mutual: bool

    def to_dict(self) -> Dict[str, Any]:
        return {'status': self.status, 'mutual': self.mutual}
