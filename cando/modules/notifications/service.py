import logging
from supabase import Client
from cando.modules.notifications.schemas import NotificationResponse, NotificationsPage
from cando.core.errors import http_error_from_supabase
from typing import List

logger = logging.getLogger(__name__)


def unread_count_from(rows: List[dict]) -> int:
    """Every row of get_user_notifications carries the inbox-wide unread count"""
    if not rows:
        return 0
    return int(rows[0].get("unread_count") or 0)


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_notifications(self, page: int = 1, limit: int = 10) -> NotificationsPage:
        try:
            result = self.supabase.rpc("get_user_notifications", {
                "p_limit": limit,
                "p_page_number": page
            }).execute()
            rows = result.data or []
            return NotificationsPage(
                notifications=[NotificationResponse(**row) for row in rows],
                unread_count=unread_count_from(rows),
                page=page,
                limit=limit
            )
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load notifications")

    def get_unread_count(self) -> int:
        try:
            result = self.supabase.rpc("get_user_notifications", {
                "p_limit": 1,
                "p_page_number": 1
            }).execute()
            return unread_count_from(result.data or [])
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load unread count")

    def mark_as_read(self, notification_id: str) -> bool:
        try:
            self.supabase.rpc("mark_notification_as_read", {
                "p_notification_id": notification_id
            }).execute()
            return True
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to mark notification as read")

    def mark_all_as_read(self) -> bool:
        try:
            self.supabase.rpc("mark_all_notifications_as_read", {}).execute()
            logger.info("Marked all notifications as read")
            return True
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to mark notifications as read")
