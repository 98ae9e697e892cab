from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    product_id: Optional[int] = None
    message: str
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int
    unread_count: int
