from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class NotificationResponse(BaseModel):
    id: str
    type: Optional[str] = None
    content: Optional[str] = None
    link: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationsPage(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
    page: int
    limit: int


class UnreadCountResponse(BaseModel):
    unread_count: int
