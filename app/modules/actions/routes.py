from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase_admin
from app.modules.actions.schemas import EmptyBinRequest, EmptyBinResponse, ActionHistoryResponse
from app.modules.actions.service import ActionService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/actions", tags=["actions"])


def get_action_service(supabase: Client = Depends(get_supabase_admin)) -> ActionService:
    return ActionService(supabase)


@router.post("/empty", response_model=EmptyBinResponse, status_code=201)
async def empty_bin(
    request: EmptyBinRequest,
    user_data: Dict = Depends(require_permission("actions:create")),
    service: ActionService = Depends(get_action_service)
):
    """Record an empty-bin action (optionally tied to a bin)"""
    return service.record_empty(user_data, request)


@router.get("/history", response_model=ActionHistoryResponse)
async def get_history(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    bin_id: Optional[str] = None,
    user_data: Dict = Depends(require_permission("actions:read")),
    service: ActionService = Depends(get_action_service)
):
    """List action history, most recent first"""
    return service.get_history(limit=limit, offset=offset, bin_id=bin_id)
