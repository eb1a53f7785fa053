from supabase import Client
from app.core.validators import is_uuid
from app.modules.notifications.models import NOTIFICATION_COLUMNS
from app.modules.notifications.schemas import (
    NotificationCreate, NotificationResponse, NotificationListResponse, MarkAllReadResponse
)
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _check_bin_filter(bin_id: Optional[str]) -> None:
    if bin_id and not is_uuid(bin_id):
        raise HTTPException(status_code=400, detail="bin_id must be a UUID")


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_notifications(
        self,
        bin_id: Optional[str] = None,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0
    ) -> NotificationListResponse:
        """Newest first, with the bin's name and location embedded"""
        _check_bin_filter(bin_id)
        try:
            query = self.supabase.table("notifications").select(NOTIFICATION_COLUMNS)
            if bin_id:
                query = query.eq("bin_id", bin_id)
            if unread_only:
                query = query.eq("read", False)
            result = query\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()

            unread_query = self.supabase.table("notifications")\
                .select("id", count="exact")\
                .eq("read", False)
            if bin_id:
                unread_query = unread_query.eq("bin_id", bin_id)
            unread = unread_query.execute()
        except Exception as e:
            logger.error(f"Error listing notifications: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch notifications")

        unread_count = unread.count if unread.count is not None else len(unread.data or [])
        return NotificationListResponse(
            notifications=[NotificationResponse(**n) for n in result.data or []],
            unread_count=unread_count
        )

    def create_notification(self, notification_data: NotificationCreate) -> NotificationResponse:
        if not is_uuid(notification_data.bin_id):
            raise HTTPException(status_code=404, detail="Bin not found")
        try:
            bin_result = self.supabase.table("trash_bins")\
                .select("id")\
                .eq("id", notification_data.bin_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error checking bin {notification_data.bin_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create notification")
        if not bin_result.data:
            raise HTTPException(status_code=404, detail="Bin not found")

        row = self.insert(notification_data.bin_id, notification_data.message, notification_data.type)
        return NotificationResponse(**row)

    def insert(self, bin_id: str, message: str, notification_type: str) -> Dict[str, Any]:
        """Insert an alert row and return it. Callers have already validated the bin."""
        try:
            result = self.supabase.table("notifications").insert({
                "bin_id": bin_id,
                "message": message,
                "type": notification_type,
                "read": False,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
        except Exception as e:
            logger.error(f"Error creating notification for bin {bin_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create notification")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create notification")
        return result.data[0]

    def mark_read(self, notification_id: str) -> NotificationResponse:
        if not is_uuid(notification_id):
            raise HTTPException(status_code=404, detail="Notification not found")
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True})\
                .eq("id", notification_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} read: {e}")
            raise HTTPException(status_code=500, detail="Failed to update notification")
        if not result.data:
            raise HTTPException(status_code=404, detail="Notification not found")
        return NotificationResponse(**result.data[0])

    def mark_all_read(self, bin_id: Optional[str] = None) -> MarkAllReadResponse:
        _check_bin_filter(bin_id)
        try:
            query = self.supabase.table("notifications")\
                .update({"read": True})\
                .eq("read", False)
            if bin_id:
                query = query.eq("bin_id", bin_id)
            result = query.execute()
        except Exception as e:
            logger.error(f"Error marking notifications read: {e}")
            raise HTTPException(status_code=500, detail="Failed to update notifications")
        updated = len(result.data or [])
        return MarkAllReadResponse(message="All notifications marked as read", updated=updated)

    def delete_notification(self, notification_id: str) -> None:
        if not is_uuid(notification_id):
            raise HTTPException(status_code=404, detail="Notification not found")
        try:
            result = self.supabase.table("notifications")\
                .delete()\
                .eq("id", notification_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting notification {notification_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete notification")
        if not result.data:
            raise HTTPException(status_code=404, detail="Notification not found")
