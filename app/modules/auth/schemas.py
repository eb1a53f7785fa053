from pydantic import BaseModel, EmailStr
from typing import Optional


class RegisterRequest(BaseModel):
    # Optional so missing fields reach the service and come back as 400
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class ResendConfirmationRequest(BaseModel):
    email: Optional[EmailStr] = None


class UserProfile(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: str = "public"
    avatar_url: Optional[str] = None


class RegisterResponse(BaseModel):
    message: str
    user: UserProfile


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserProfile


class MessageResponse(BaseModel):
    message: str
