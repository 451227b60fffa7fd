#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from core.assessment.models import ResponseInput


class AssessmentAnswer(BaseModel):
    """One forced-choice answer."""
    question_id: str = Field(..., description="Question id from the session's question list")
    selected_option: str = Field(..., description="A or B")
    response_time_ms: Optional[int] = Field(None, description="Time taken to answer, in milliseconds")

    def to_input(self) -> ResponseInput:
        return ResponseInput(
            question_id=self.question_id,
            selected_option=self.selected_option,
            response_time_ms=self.response_time_ms,
        )


class AssessmentSubmitRequest(BaseModel):
    """Answers for a session; used for both partial saves and the final submit."""
    session_id: str = Field(..., description="Session returned by /api/assessment/start")
    responses: List[AssessmentAnswer] = Field(default_factory=list)

    def to_inputs(self) -> List[ResponseInput]:
        return [r.to_input() for r in self.responses]


class MatchRespondRequest(BaseModel):
    """Owner's answer to a suggested match."""
    match_id: str
    action: str = Field(..., description="interested or rejected")


class MarkReadRequest(BaseModel):
    """Mark one notification, or all of them, as read."""
    id: Optional[str] = None
    mark_all_read: bool = False
