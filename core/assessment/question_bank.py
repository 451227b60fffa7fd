#!/usr/bin/env python3
"""
Question Bank - validated, immutable catalog of quiz items.

Catalog entries arrive from YAML (seeding) or from assessment_question rows.
Both paths go through QuestionSpec, which normalises the option delta
blobs into {Dimension: float} maps. Unknown dimensions and non-numeric
deltas are dropped with a warning; an entry whose own dimension is invalid
is skipped entirely. Either way one bad entry never blocks the rest.
"""

import json
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from core.assessment.models import QuizQuestion
from core.dimensions import Dimension, parse_dimension

logger = logging.getLogger(__name__)


def _coerce_deltas(raw: Any, question_id: str = "?") -> Dict[Dimension, float]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Question {question_id}: option deltas are not valid JSON, ignoring")
            return {}
    if not isinstance(raw, dict):
        logger.warning(f"Question {question_id}: option deltas are not a mapping, ignoring")
        return {}

    deltas: Dict[Dimension, float] = {}
    for key, value in raw.items():
        dimension = parse_dimension(key)
        if dimension is None:
            logger.warning(f"Question {question_id}: unknown dimension {key!r} in deltas, ignoring")
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            logger.warning(f"Question {question_id}: non-numeric delta for {key!r}, ignoring")
            continue
        deltas[dimension] = deltas.get(dimension, 0.0) + float(value)
    return deltas


class QuestionSpec(BaseModel):
    """Catalog entry as stored or seeded."""
    id: str
    dimension: Dimension
    option_a_text: str
    option_b_text: str
    option_a_scores: Dict[Dimension, float] = {}
    option_b_scores: Dict[Dimension, float] = {}
    is_active: bool = True

    @field_validator('dimension', mode='before')
    @classmethod
    def _normalise_dimension(cls, value: Any) -> Any:
        return parse_dimension(value) or value

    @field_validator('option_a_scores', 'option_b_scores', mode='before')
    @classmethod
    def _lenient_deltas(cls, value: Any, info) -> Dict[Dimension, float]:
        question_id = (info.data or {}).get('id', '?')
        return _coerce_deltas(value, question_id)

    def to_question(self) -> QuizQuestion:
        return QuizQuestion(
            id=self.id,
            dimension=self.dimension,
            option_a_text=self.option_a_text,
            option_b_text=self.option_b_text,
            option_a_deltas=dict(self.option_a_scores),
            option_b_deltas=dict(self.option_b_scores),
            active=self.is_active,
        )

    def to_record(self) -> Dict[str, Any]:
        """Column values for an assessment_question insert."""
        return {
            'id': self.id,
            'dimension': self.dimension.value,
            'option_a_text': self.option_a_text,
            'option_b_text': self.option_b_text,
            'option_a_scores': {k.value: v for k, v in self.option_a_scores.items()},
            'option_b_scores': {k.value: v for k, v in self.option_b_scores.items()},
            'is_active': self.is_active,
        }


def parse_specs(entries: Iterable[Dict[str, Any]]) -> List[QuestionSpec]:
    specs: List[QuestionSpec] = []
    for entry in entries:
        try:
            specs.append(QuestionSpec.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Skipping malformed question {entry.get('id', '?')}: {e.error_count()} error(s)")
    return specs


class QuestionBank:
    """Read-only catalog. Lookups by id include inactive questions."""

    def __init__(self, questions: Iterable[QuizQuestion]):
        self._questions: Dict[str, QuizQuestion] = {}
        for question in questions:
            if question.id in self._questions:
                logger.warning(f"Duplicate question id {question.id} in bank, keeping first")
                continue
            self._questions[question.id] = question

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> "QuestionBank":
        """Build from ORM rows (or any objects exposing the column attributes)."""
        entries = [
            {
                'id': r.id,
                'dimension': r.dimension,
                'option_a_text': r.option_a_text,
                'option_b_text': r.option_b_text,
                'option_a_scores': r.option_a_scores,
                'option_b_scores': r.option_b_scores,
                'is_active': r.is_active,
            }
            for r in records
        ]
        return cls(spec.to_question() for spec in parse_specs(entries))

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._questions

    def get(self, question_id: str) -> Optional[QuizQuestion]:
        return self._questions.get(question_id)

    def active(self) -> List[QuizQuestion]:
        return [q for q in self._questions.values() if q.active]

    def by_dimension(self, active_only: bool = True) -> Dict[Dimension, List[QuizQuestion]]:
        grouped: Dict[Dimension, List[QuizQuestion]] = {}
        questions = self.active() if active_only else list(self._questions.values())
        for question in questions:
            grouped.setdefault(question.dimension, []).append(question)
        return grouped

    def ordered(self, question_ids: Iterable[str]) -> List[QuizQuestion]:
        """Questions in the given order, silently dropping unknown ids."""
        return [self._questions[qid] for qid in question_ids if qid in self._questions]


def load_question_file(path: str) -> List[QuestionSpec]:
    """Load a YAML catalog: a list of entries, or a mapping with a 'questions' list."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get('questions', [])
    return parse_specs(data)
