from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime


class NotificationCreate(BaseModel):
    bin_id: str
    message: str = Field(..., min_length=1)
    type: Literal["info", "warning", "critical"] = "info"


class BinSummary(BaseModel):
    id: str
    name: str
    location: Optional[str] = None


class NotificationResponse(BaseModel):
    id: str
    bin_id: Optional[str] = None
    message: str
    type: str
    read: bool = False
    created_at: Optional[datetime] = None
    trash_bins: Optional[BinSummary] = None

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int = Field(0, alias="unreadCount")

    class Config:
        populate_by_name = True


class MarkAllReadResponse(BaseModel):
    message: str
    updated: int
