#!/usr/bin/env python3
"""
Assessment Module - Working-style estimator.

Public API:
- AssessmentService: start/resume, partial save and submit of quiz sessions
- QuestionBank: validated question catalog
- select_questions / score_session / blend: the pure estimator steps

- models.py: Quiz dataclasses (QuizQuestion, ResponseInput, ProfileState)
- question_bank.py: Catalog loading and delta validation
- selection.py: Balanced, unseen-first question selection
- scoring.py: Session scoring and online profile blending
- service.py: AssessmentService orchestrator
"""

from core.assessment.models import (
    QuizQuestion, ResponseInput, ProfileState, StartedAssessment, OPTION_A, OPTION_B
)
from core.assessment.question_bank import QuestionBank, QuestionSpec, load_question_file
from core.assessment.selection import select_questions
from core.assessment.scoring import score_session, blend
from core.assessment.service import AssessmentService

__all__ = [
    'AssessmentService', 'QuestionBank', 'QuestionSpec', 'load_question_file',
    'select_questions', 'score_session', 'blend',
    'QuizQuestion', 'ResponseInput', 'ProfileState', 'StartedAssessment',
    'OPTION_A', 'OPTION_B',
]
