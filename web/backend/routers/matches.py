#!/usr/bin/env python3
"""
Match endpoints - run matching, list, view and respond to co-founder matches.
"""

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.matching.service import MatchingService
from ..dependencies import get_current_user_id, get_matching_service
from ..models.requests import MatchRespondRequest
from ..models.responses import (
    MatchListResponse,
    MatchDetailResponse,
    RunMatchingResponse,
    RespondResponse,
    MatchOut,
)

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/matches", tags=["matches"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": f"Rate limit exceeded: {exc.detail}",
            "type": "RateLimitExceeded"
        }
    )


@router.post("/run", response_model=RunMatchingResponse)
@limiter.limit("5/minute")
def run_matching(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service)
):
    """
    Score the candidate pool and create new matches.

    Only candidates at or above the match threshold are kept, best first,
    capped at the configured top N. `total` counts every qualifying
    candidate; `shown` counts the matches created by this call.
    """
    result = service.run_matching(user_id)
    return RunMatchingResponse(
        matches=[MatchOut(**m.to_dict()) for m in result.matches],
        total=result.total,
        shown=result.shown,
    )


@router.get("", response_model=MatchListResponse)
def list_matches(
    user_id: str = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service)
):
    """
    Active matches for the acting user: suggested, viewed, interested or
    accepted, and not expired. Sorted by score (highest first).
    """
    matches = service.list_active(user_id)
    return MatchListResponse(
        count=len(matches),
        matches=[MatchOut(**m.to_dict()) for m in matches],
    )


@router.post("/respond", response_model=RespondResponse)
def respond_to_match(
    body: MatchRespondRequest,
    user_id: str = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service)
):
    """
    Answer a match with `interested` or `rejected`.

    Returns `accepted` with `mutual: true` when the other user had already
    expressed interest.
    """
    result = service.respond(user_id, body.match_id, body.action)
    return RespondResponse(status=result.status, mutual=result.mutual)


@router.post("/{match_id}/view", response_model=MatchDetailResponse)
def view_match(
    match_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service)
):
    """Open a match; a suggested match becomes viewed."""
    view = service.view_match(user_id, match_id)
    return MatchDetailResponse(match=MatchOut(**view.to_dict()))
