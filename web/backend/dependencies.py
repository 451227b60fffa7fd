#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache

from fastapi import Depends, Header

from core.app_context import AppContext
from core.assessment.service import AssessmentService
from core.matching.service import MatchingService
from notification.service import NotificationService
from .config import get_config


@lru_cache()
def get_app_context() -> AppContext:
    """
    Wired services for the running app, built once from config.

    Tests override this dependency with a context bound to their own
    session factory.
    """
    return AppContext.build(get_config())


def get_current_user_id(x_user_id: str = Header(..., alias="X-User-Id")) -> str:
    """
    Acting user id, set by the authenticating proxy in front of this API.

    The value is validated by the services; a malformed id is a 400.
    """
    return x_user_id


def get_assessment_service(ctx: AppContext = Depends(get_app_context)) -> AssessmentService:
    return ctx.assessment_service


def get_matching_service(ctx: AppContext = Depends(get_app_context)) -> MatchingService:
    return ctx.matching_service


def get_notification_service(ctx: AppContext = Depends(get_app_context)) -> NotificationService:
    return ctx.notification_service
