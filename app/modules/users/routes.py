from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase_admin
from app.modules.users.schemas import UserUpdate, UserResponse, RoleUpdate
from app.modules.users.service import UserService
from app.core.dependencies import get_current_user, require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase_admin)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("users:read")),
    service: UserService = Depends(get_user_service)
):
    """List user profiles (admin only)"""
    return service.list_users(role=role, limit=limit, offset=offset)


@router.put("/me", response_model=UserResponse)
async def update_me(
    user_data_body: UserUpdate,
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Edit own name, phone or avatar"""
    return service.update_profile(current_user["id"], user_data_body)


@router.put("/{user_id}/role", response_model=UserResponse)
async def set_user_role(
    user_id: str,
    role_data: RoleUpdate,
    user_data: Dict = Depends(require_permission("users:assign_role")),
    service: UserService = Depends(get_user_service)
):
    """Promote or demote a user (admin only)"""
    return service.set_role(user_id, role_data.role)
