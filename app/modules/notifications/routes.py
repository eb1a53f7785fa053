from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase_admin
from app.modules.notifications.schemas import (
    NotificationCreate, NotificationResponse, NotificationListResponse, MarkAllReadResponse
)
from app.modules.notifications.service import NotificationService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase_admin)) -> NotificationService:
    return NotificationService(supabase)


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    bin_id: Optional[str] = None,
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("notifications:read")),
    service: NotificationService = Depends(get_notification_service)
):
    """List notifications with the unread count"""
    return service.list_notifications(bin_id=bin_id, unread_only=unread_only, limit=limit, offset=offset)


@router.post("", response_model=NotificationResponse, status_code=201)
async def create_notification(
    notification_data: NotificationCreate,
    user_data: Dict = Depends(require_permission("notifications:create")),
    service: NotificationService = Depends(get_notification_service)
):
    """Raise a manual alert on a bin (field officers and admins)"""
    return service.create_notification(notification_data)


@router.patch("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    bin_id: Optional[str] = None,
    user_data: Dict = Depends(require_permission("notifications:update")),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_all_read(bin_id)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    user_data: Dict = Depends(require_permission("notifications:update")),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_read(notification_id)


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: str,
    user_data: Dict = Depends(require_permission("notifications:delete")),
    service: NotificationService = Depends(get_notification_service)
):
    service.delete_notification(notification_id)
    return None
