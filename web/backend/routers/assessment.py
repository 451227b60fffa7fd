#!/usr/bin/env python3
"""
Assessment endpoints - working-style quiz sessions.
"""

import logging
from fastapi import APIRouter, Depends

from core.assessment.service import AssessmentService
from ..dependencies import get_current_user_id, get_assessment_service
from ..models.requests import AssessmentSubmitRequest
from ..models.responses import (
    StartAssessmentResponse,
    SaveResponsesResponse,
    WorkingStyleResponse,
    WorkingStyleOut,
    QuestionOut,
    AnswerOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assessment", tags=["assessment"])


@router.post("/start", response_model=StartAssessmentResponse)
def start_assessment(
    user_id: str = Depends(get_current_user_id),
    service: AssessmentService = Depends(get_assessment_service)
):
    """
    Start a new quiz session, or resume the open one.

    A resumed session returns its original question list and the answers
    saved so far.
    """
    started = service.start_or_resume(user_id)
    return StartAssessmentResponse(
        session_id=started.session_id,
        version=started.version,
        questions=[QuestionOut(**q.to_dict()) for q in started.questions],
        existing_responses=[
            AnswerOut(
                question_id=r.question_id,
                selected_option=r.selected_option,
                response_time_ms=r.response_time_ms,
            )
            for r in started.existing_responses
        ],
        resumed=started.resumed,
    )


@router.post("/responses", response_model=SaveResponsesResponse)
def save_responses(
    body: AssessmentSubmitRequest,
    user_id: str = Depends(get_current_user_id),
    service: AssessmentService = Depends(get_assessment_service)
):
    """Save answers without completing the session."""
    saved = service.save_responses(user_id, body.session_id, body.to_inputs())
    return SaveResponsesResponse(saved=saved)


@router.post("/submit", response_model=WorkingStyleResponse)
def submit_assessment(
    body: AssessmentSubmitRequest,
    user_id: str = Depends(get_current_user_id),
    service: AssessmentService = Depends(get_assessment_service)
):
    """
    Complete the session and return the updated working-style profile.

    Returns 409 if the session was already completed.
    """
    profile = service.submit(user_id, body.session_id, body.to_inputs())
    return WorkingStyleResponse(working_style=WorkingStyleOut(**profile.to_dict()))


@router.get("/profile", response_model=WorkingStyleResponse)
def get_working_style(
    user_id: str = Depends(get_current_user_id),
    service: AssessmentService = Depends(get_assessment_service)
):
    """Current working-style profile, or null before the first completed session."""
    profile = service.get_profile(user_id)
    return WorkingStyleResponse(
        working_style=WorkingStyleOut(**profile.to_dict()) if profile else None
    )
