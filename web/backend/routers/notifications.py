#!/usr/bin/env python3
"""
Notification endpoints - in-app notification bell.
"""

from fastapi import APIRouter, Depends, Query

from notification.service import NotificationService
from ..dependencies import get_current_user_id, get_notification_service
from ..models.requests import MarkReadRequest
from ..models.responses import (
    NotificationListResponse,
    NotificationOut,
    MarkReadResponse
)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(default=30, ge=1, le=100, description="Maximum notifications to return"),
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """
    Most recent notifications for the acting user, newest first, with the
    total unread count.
    """
    result = service.list_notifications(user_id, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationOut(**n) for n in result['notifications']],
        unread_count=result['unread_count'],
    )


@router.post("/read", response_model=MarkReadResponse)
def mark_read(
    body: MarkReadRequest,
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """
    Mark a single notification (`id`) or all of them (`mark_all_read`) as read.
    """
    updated = service.mark_read(user_id, notification_id=body.id, mark_all=body.mark_all_read)
    return MarkReadResponse(updated=updated)
