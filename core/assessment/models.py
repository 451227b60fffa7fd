#!/usr/bin/env python3
"""
Assessment Models - Typed quiz data used by selection and scoring.

Raw catalog rows store option deltas as loose JSON; by the time a question
reaches these dataclasses its deltas are a validated {Dimension: float} map.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.dimensions import Dimension

OPTION_A = "A"
OPTION_B = "B"
OPTIONS = (OPTION_A, OPTION_B)


@dataclass(frozen=True)
class QuizQuestion:
    """Immutable catalog question."""
    id: str
    dimension: Dimension
    option_a_text: str
    option_b_text: str
    option_a_deltas: Dict[Dimension, float] = field(default_factory=dict)
    option_b_deltas: Dict[Dimension, float] = field(default_factory=dict)
    active: bool = True

    def deltas_for(self, option: str) -> Dict[Dimension, float]:
        if option == OPTION_A:
            return self.option_a_deltas
        if option == OPTION_B:
            return self.option_b_deltas
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Client-facing view. Deltas are not exposed to respondents."""
        return {
            'id': self.id,
            'dimension': self.dimension.value,
            'option_a_text': self.option_a_text,
            'option_b_text': self.option_b_text,
        }


@dataclass(frozen=True)
class ResponseInput:
    question_id: str
    selected_option: str
    response_time_ms: Optional[int] = None


@dataclass
class ProfileState:
    """A user's blended working-style estimate."""
    scores: Dict[Dimension, float]
    confidence: float
    sessions_count: int
    last_assessed_at: datetime
    next_refresh_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scores': {dimension.value: value for dimension, value in self.scores.items()},
            'confidence': self.confidence,
            'sessions_count': self.sessions_count,
            'last_assessed_at': self.last_assessed_at.isoformat(),
            'next_refresh_at': self.next_refresh_at.isoformat(),
        }


@dataclass
class StartedAssessment:
    session_id: str
    version: int
    questions: List[QuizQuestion]
    existing_responses: List[ResponseInput]
    resumed: bool
