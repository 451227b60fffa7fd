#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class QuestionOut(BaseModel):
    """Quiz question as shown to the respondent (score deltas are never exposed)."""
    id: str
    dimension: str
    option_a_text: str
    option_b_text: str


class AnswerOut(BaseModel):
    question_id: str
    selected_option: str
    response_time_ms: Optional[int] = None


class StartAssessmentResponse(BaseModel):
    success: bool = True
    session_id: str
    version: int
    questions: List[QuestionOut]
    existing_responses: List[AnswerOut] = Field(default_factory=list)
    resumed: bool


class SaveResponsesResponse(BaseModel):
    success: bool = True
    saved: int


class WorkingStyleOut(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "scores": {
                    "risk_tolerance": 62.5,
                    "decision_style": 40.0,
                    "pace": 70.0,
                    "conflict_approach": 55.0,
                    "role_gravity": 30.0,
                    "communication": 65.0
                },
                "confidence": 0.5,
                "sessions_count": 1,
                "last_assessed_at": "2026-02-01T12:00:00+00:00",
                "next_refresh_at": "2026-05-01T12:00:00+00:00"
            }
        }
    )

    scores: Dict[str, float]
    confidence: float = Field(gt=0, lt=1)
    sessions_count: int = Field(ge=1)
    last_assessed_at: str
    next_refresh_at: str


class WorkingStyleResponse(BaseModel):
    success: bool = True
    working_style: Optional[WorkingStyleOut] = None


class MatchOut(BaseModel):
    """A match from its owner's point of view."""
    match_id: str
    score: float = Field(ge=0, le=100)
    status: str
    breakdown: Dict[str, Any] = Field(default_factory=dict)
    candidate: Dict[str, Any] = Field(default_factory=dict)
    expires_at: Optional[str] = None
    viewed_at: Optional[str] = None
    responded_at: Optional[str] = None
    created_at: Optional[str] = None


class RunMatchingResponse(BaseModel):
    success: bool = True
    matches: List[MatchOut]
    total: int
    shown: int


class MatchListResponse(BaseModel):
    success: bool = True
    count: int
    matches: List[MatchOut]


class MatchDetailResponse(BaseModel):
    success: bool = True
    match: MatchOut


class RespondResponse(BaseModel):
    success: bool = True
    status: str
    mutual: bool


class NotificationOut(BaseModel):
    id: str
    type: str
    title: str
    content: str
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    match_id: Optional[str] = None
    is_read: bool
    read_at: Optional[str] = None
    created_at: Optional[str] = None


class NotificationListResponse(BaseModel):
    success: bool = True
    notifications: List[NotificationOut]
    unread_count: int


class MarkReadResponse(BaseModel):
    success: bool = True
    updated: int
