from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase, get_supabase_admin
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, ResendConfirmationRequest,
    LoginResponse, RegisterResponse, MessageResponse
)
from app.modules.auth.service import AuthService
from app.modules.users.service import UserService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    admin: Client = Depends(get_supabase_admin)
) -> AuthService:
    return AuthService(supabase, admin)


def get_user_service(admin: Client = Depends(get_supabase_admin)) -> UserService:
    return UserService(admin)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user; Supabase sends the confirmation email"""
    return service.register(register_data)


@router.post("/resend-confirmation", response_model=MessageResponse)
async def resend_confirmation(
    resend_data: ResendConfirmationRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Resend the signup confirmation email"""
    return service.resend_confirmation(resend_data)


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get a session token"""
    return service.login(login_data)


@router.get("/me")
async def get_me(
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Get the full profile of the authenticated user"""
    return {"user": service.get_profile(current_user)}


@router.post("/logout", response_model=MessageResponse)
async def logout():
    """Tokens are stateless; the client drops its copy"""
    return MessageResponse(message="Logged out successfully")
