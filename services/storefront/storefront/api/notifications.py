from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from storefront.db.database import get_db
from storefront.schemas.notification import (
    NotificationResponse, NotificationListResponse, MarkAllReadResponse,
)
from storefront.auth.dependencies import get_current_user
from storefront.exceptions import NotFoundError
from storefront.models.user import User
from storefront.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"]
)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Dependency to get notification service"""
    return NotificationService(db)


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List my notifications",
    description="""
    Notifications of the authenticated user, newest first, with the unread count.

    **Requirements:**
    - Authentication: Required (JWT token)
    """,
    responses={
        200: {"description": "Notifications and unread count"},
        401: {"description": "Authentication required"}
    }
)
async def list_notifications(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    return {
        "notifications": notification_service.list_for_user(current_user.id),
        "unread_count": notification_service.unread_count(current_user.id),
    }


@router.put(
    "/read-all",
    response_model=MarkAllReadResponse,
    summary="Mark all my notifications as read",
    responses={
        200: {"description": "Number of notifications that changed"},
        401: {"description": "Authentication required"}
    }
)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    updated = notification_service.mark_all_read(current_user.id)
    return {"updated": updated, "unread_count": 0}


@router.put(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark a notification as read",
    responses={
        200: {"description": "Notification marked as read"},
        401: {"description": "Authentication required"},
        404: {"description": "Notification not found"}
    }
)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    try:
        return notification_service.mark_read(notification_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
