from supabase import Client
from app.core.validators import is_uuid
from app.modules.actions.models import EMPTY_BIN, ACTION_COLUMNS
from app.modules.actions.schemas import (
    EmptyBinRequest, EmptyBinResponse, ActionResponse, ActionHistoryResponse
)
from app.modules.bins.service import BinService
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ActionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.bins = BinService(supabase)

    def record_empty(self, user_data: Dict[str, Any], request: EmptyBinRequest) -> EmptyBinResponse:
        """Log an EMPTY_BIN action and, when a bin is named, reset its fill level"""
        bin_id = request.bin_id or None
        if bin_id is not None and not is_uuid(bin_id):
            raise HTTPException(status_code=400, detail="bin_id must be a UUID")
        if bin_id:
            self.bins.get_bin_row(bin_id)

        # Dev bypass users have no row in users, so they are logged anonymously
        user_id = user_data.get("id") if is_uuid(user_data.get("id")) else None
        action = self._append(EMPTY_BIN, user_id=user_id, bin_id=bin_id, notes=request.notes)

        bin_row = self.bins.reset_bin(bin_id) if bin_id else None
        logger.info(f"Bin {bin_id or '-'} emptied by {user_data.get('id')}")
        return EmptyBinResponse(message="Action recorded", action=action, bin=bin_row)

    def _append(self, action: str, user_id: Optional[str], bin_id: Optional[str], notes: Optional[str]) -> ActionResponse:
        try:
            result = self.supabase.table("action_history").insert({
                "user_id": user_id,
                "bin_id": bin_id,
                "action": action,
                "notes": notes or None,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
        except Exception as e:
            logger.error(f"Record {action} action failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to record action")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to record action")
        return ActionResponse(**result.data[0])

    def get_history(self, limit: int = 50, offset: int = 0, bin_id: Optional[str] = None) -> ActionHistoryResponse:
        """Action history, most recent first"""
        if bin_id and not is_uuid(bin_id):
            raise HTTPException(status_code=400, detail="bin_id must be a UUID")
        try:
            query = self.supabase.table("action_history").select(ACTION_COLUMNS)
            if bin_id:
                query = query.eq("bin_id", bin_id)
            result = query\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
        except Exception as e:
            logger.error(f"Fetch history failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch history")
        return ActionHistoryResponse(
            history=[ActionResponse(**row) for row in result.data or []],
            limit=limit,
            offset=offset
        )
