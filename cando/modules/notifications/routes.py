from fastapi import APIRouter, Depends, Query
from cando.database.supabase_client import get_user_supabase
from cando.modules.notifications.schemas import NotificationsPage, UnreadCountResponse
from cando.modules.notifications.service import NotificationService
from cando.core.dependencies import get_current_user_id
from cando.config.settings import settings
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_user_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("", response_model=NotificationsPage)
async def list_notifications(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.notifications_page_size, ge=1, le=100),
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Get a page of the caller's notifications"""
    return service.list_notifications(page, limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    return UnreadCountResponse(unread_count=service.get_unread_count())


@router.post("/read-all")
async def mark_all_as_read(
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark every notification as read"""
    return {"success": service.mark_all_as_read()}


@router.post("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    return {"success": service.mark_as_read(notification_id)}
