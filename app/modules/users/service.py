from supabase import Client
from app.config import settings
from app.core.validators import is_uuid
from app.modules.users.models import USER_COLUMNS, EDITABLE_FIELDS
from app.modules.users.schemas import UserUpdate, UserResponse, OfficerSummary
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, current_user: Dict[str, Any]) -> UserResponse:
        """Full profile for the token's user; a stable fake one under dev bypass"""
        if settings.dev_bypass_auth:
            now = datetime.now(timezone.utc)
            return UserResponse(
                id=current_user.get("id") or "dev-user-1",
                name=current_user.get("name") or "Developer",
                email=current_user.get("email") or "dev@example.com",
                role=current_user.get("role") or "admin",
                created_at=now,
                updated_at=now,
                last_login=now,
            )
        return self.get_user_by_id(current_user["id"])

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        try:
            result = self.supabase.table("users")\
                .select(USER_COLUMNS)\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch user")

        if not result.data:
            raise HTTPException(status_code=404, detail="User not found")
        return UserResponse(**result.data[0])

    def get_officer(self, officer_id: Optional[str]) -> Optional[OfficerSummary]:
        """Public contact card of a bin's field officer; None when unassigned or unreadable"""
        if not officer_id:
            return None
        try:
            result = self.supabase.table("users")\
                .select("id, name, email, phone, avatar_url")\
                .eq("id", officer_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.warning(f"Error fetching field officer {officer_id}: {e}")
            return None
        if not result.data:
            return None
        return OfficerSummary(**result.data[0])

    def update_profile(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update the editable profile fields"""
        update_data = {
            field: value
            for field, value in user_data.model_dump(exclude_unset=True).items()
            if field in EDITABLE_FIELDS and value is not None
        }
        if not update_data:
            raise HTTPException(status_code=400, detail="No profile fields to update")
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update profile")

        if not result.data:
            raise HTTPException(status_code=404, detail="User not found")
        return UserResponse(**result.data[0])

    def list_users(self, role: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[UserResponse]:
        """List user profiles, newest first"""
        try:
            query = self.supabase.table("users").select(USER_COLUMNS)
            if role:
                query = query.eq("role", role)
            result = query\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise HTTPException(status_code=500, detail="Failed to list users")
        return [UserResponse(**user) for user in result.data or []]

    def set_role(self, user_id: str, role: str) -> UserResponse:
        if not is_uuid(user_id):
            raise HTTPException(status_code=404, detail="User not found")
        try:
            result = self.supabase.table("users")\
                .update({"role": role, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error setting role for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update role")

        if not result.data:
            raise HTTPException(status_code=404, detail="User not found")
        logger.info(f"User {user_id} role set to {role}")
        return UserResponse(**result.data[0])
