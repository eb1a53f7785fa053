import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException
from supabase import Client

from app.config.roles_config import DEFAULT_ROLE
from app.config.settings import settings
from app.core.dependencies import DEV_USER
from app.core.security import create_token, hash_password
from app.core.throttle import EmailThrottle
from app.core.validators import is_unique_violation
from app.modules.auth.schemas import (
    LoginRequest, LoginResponse, MessageResponse, RegisterRequest,
    RegisterResponse, ResendConfirmationRequest, UserProfile
)

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, name, email, phone, role, avatar_url"
MIN_PASSWORD_LENGTH = 6

# Supabase refuses a second confirmation email for the same address within ~10s
_register_throttle = EmailThrottle(settings.register_min_interval_seconds)
_resend_throttle = EmailThrottle(settings.resend_min_interval_seconds)


def reset_throttles() -> None:
    _register_throttle.clear()
    _resend_throttle.clear()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _coalesce(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _is_provider_rate_limit(error: Exception) -> bool:
    message = str(error).lower()
    return getattr(error, "status", None) == 429 or "only request this after" in message


def _is_credentials_error(error: Exception) -> bool:
    if getattr(error, "status", None) in (400, 401, 403):
        return True
    message = str(error).lower()
    return "invalid" in message or "credentials" in message or "not confirmed" in message


def _fallback_name(auth_user: Any) -> str:
    metadata = getattr(auth_user, "user_metadata", None) or {}
    email = getattr(auth_user, "email", None) or ""
    return metadata.get("name") or (email.split("@")[0] if email else "User")


def merge_profile(profile: Optional[Dict[str, Any]], auth_user: Any) -> Dict[str, Any]:
    """Local profile row wins; Supabase Auth metadata fills the gaps.

    Role is only ever taken from app_metadata, which users cannot edit.
    """
    profile = profile or {}
    metadata = getattr(auth_user, "user_metadata", None) or {}
    app_metadata = getattr(auth_user, "app_metadata", None) or {}
    return {
        "id": _coalesce(profile.get("id"), auth_user.id),
        "name": _coalesce(profile.get("name"), _fallback_name(auth_user)),
        "email": _coalesce(profile.get("email"), auth_user.email),
        "phone": _coalesce(profile.get("phone"), metadata.get("phone")),
        "role": _coalesce(profile.get("role"), app_metadata.get("role"), DEFAULT_ROLE),
        "avatar_url": _coalesce(profile.get("avatar_url"), metadata.get("avatar_url")),
    }


class AuthService:
    def __init__(self, supabase: Client, admin: Client):
        # supabase: anon client for Auth calls; admin: service-role client for the users table
        self.supabase = supabase
        self.admin = admin

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register with Supabase Auth (sends the confirmation email) and create the local profile"""
        name = (register_data.name or "").strip()
        email = register_data.email
        password = register_data.password
        if not name or not email or not password:
            raise HTTPException(status_code=400, detail="Missing required fields: name, email, password")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=400,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        wait_seconds = _register_throttle.try_acquire(email)
        if wait_seconds:
            raise HTTPException(
                status_code=429,
                detail=f"Please wait {wait_seconds}s before requesting another confirmation email."
            )
        try:
            return self._create_account(name, email, password, register_data.phone)
        except HTTPException as e:
            # Only a provider rate limit keeps the slot
            if e.status_code != 429:
                _register_throttle.release(email)
            raise

    def _create_account(self, name: str, email: str, password: str, phone: Optional[str]) -> RegisterResponse:
        # A failing lookup must not block registration
        try:
            existing = self.admin.table("users")\
                .select("id")\
                .eq("email", email)\
                .limit(1)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail="User with this email already exists")
        except HTTPException:
            raise
        except Exception as e:
            logger.warning(f"Checking existing user failed (ignored): {e}")

        try:
            auth_response = self.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "email_redirect_to": settings.email_confirm_redirect_to,
                    "data": {"name": name, "phone": phone}
                }
            })
        except Exception as e:
            logger.error(f"Supabase sign_up error: {e}")
            if _is_provider_rate_limit(e):
                raise HTTPException(status_code=429, detail="Too many requests. Please try again in 10 seconds.")
            error_message = str(e)
            if "already registered" in error_message.lower():
                raise HTTPException(status_code=409, detail="User with this email already exists")
            raise HTTPException(status_code=400, detail=error_message or "Registration failed")

        auth_user = auth_response.user
        if not auth_user or not auth_user.id:
            raise HTTPException(status_code=500, detail="Failed to create auth user")
        # With confirmations on, Supabase answers a repeat sign up with an identity-less user
        if getattr(auth_user, "identities", None) == []:
            raise HTTPException(status_code=409, detail="User with this email already exists")

        now = _now()
        profile = {
            "id": auth_user.id,
            "name": name,
            "email": email,
            "password_hash": hash_password(password),
            "phone": phone,
            "role": DEFAULT_ROLE,
            "created_at": now,
            "updated_at": now,
        }
        created = None
        try:
            result = self.admin.table("users").insert(profile).execute()
            created = result.data[0] if result.data else None
        except Exception as e:
            # Login creates the profile when it is missing
            logger.warning(f"User profile insert failed (ignored; will auto-create on login): {e}")

        user = created or profile
        return RegisterResponse(
            message="Registration successful. Check your email to confirm your account.",
            user=UserProfile(**{key: user.get(key) for key in UserProfile.model_fields})
        )

    def resend_confirmation(self, resend_data: ResendConfirmationRequest) -> MessageResponse:
        email = resend_data.email
        if not email:
            raise HTTPException(status_code=400, detail="Missing email")

        wait_seconds = _resend_throttle.try_acquire(email)
        if wait_seconds:
            raise HTTPException(
                status_code=429,
                detail=f"Please wait {wait_seconds}s before resending confirmation."
            )

        try:
            self.supabase.auth.resend({
                "type": "signup",
                "email": email,
                "options": {"email_redirect_to": settings.email_confirm_redirect_to}
            })
        except Exception as e:
            logger.error(f"Supabase resend error: {e}")
            if _is_provider_rate_limit(e):
                raise HTTPException(status_code=429, detail="Too many requests. Please try again in 10 seconds.")
            _resend_throttle.release(email)
            raise HTTPException(status_code=400, detail=str(e) or "Failed to resend confirmation")

        return MessageResponse(message="Confirmation email sent again. Check your inbox or spam folder.")

    def login(self, login_data: LoginRequest) -> LoginResponse:
        """Authenticate with Supabase Auth, reconcile the local profile and issue a session token"""
        email = login_data.email
        password = login_data.password
        if not email or not password:
            raise HTTPException(status_code=400, detail="Missing required fields: email, password")

        if settings.dev_bypass_auth:
            user = {**DEV_USER, "email": email, "phone": None, "avatar_url": None}
            return LoginResponse(
                message="Dev bypass login",
                token=create_token(user),
                user=UserProfile(**user)
            )

        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password
            })
        except Exception as e:
            if _is_credentials_error(e):
                logger.info(f"Sign in rejected for {email}: {e}")
                raise HTTPException(status_code=401, detail=str(e) or "Invalid email or password")
            logger.error(f"Supabase sign in failed: {e}")
            raise HTTPException(status_code=500, detail="Login failed")

        auth_user = auth_response.user
        if not auth_user:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        profile = self.reconcile_profile(auth_user)
        merged = merge_profile(profile, auth_user)
        self._touch_last_login(merged["id"])

        return LoginResponse(
            message="Login successful",
            token=create_token(merged),
            user=UserProfile(**merged)
        )

    def reconcile_profile(self, auth_user: Any) -> Optional[Dict[str, Any]]:
        """Make sure a users row exists for an authenticated identity and return it.

        Lookup by Auth id, then by email. A missing row is created with an
        upsert that ignores duplicates on id, so concurrent first logins end
        up with one row; both callers then read it back. Returns None only
        when the table cannot be read or written at all.
        """
        profile = self._find_profile(auth_user)
        if profile:
            return profile

        metadata = getattr(auth_user, "user_metadata", None) or {}
        now = _now()
        row = {
            "id": auth_user.id,
            "name": _fallback_name(auth_user),
            "email": auth_user.email,
            "phone": metadata.get("phone"),
            "avatar_url": metadata.get("avatar_url"),
            "role": DEFAULT_ROLE,
            "created_at": now,
            "updated_at": now,
        }
        try:
            self.admin.table("users")\
                .upsert(row, on_conflict="id", ignore_duplicates=True)\
                .execute()
        except Exception as e:
            if not is_unique_violation(e):
                logger.error(f"Auto-create profile failed for {auth_user.id}: {e}")
                return None
            # email already taken by a legacy row with a different id
            logger.info(f"Profile for {auth_user.email} already exists; re-fetching")

        profile = self._find_profile(auth_user)
        if not profile:
            logger.warning(f"Profile for {auth_user.id} missing after upsert; using Auth data only")
        return profile

    def _find_profile(self, auth_user: Any) -> Optional[Dict[str, Any]]:
        profile = self._select_profile("id", auth_user.id)
        if not profile and auth_user.email:
            profile = self._select_profile("email", auth_user.email)
        return profile

    def _select_profile(self, column: str, value: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.admin.table("users")\
                .select(PROFILE_COLUMNS)\
                .eq(column, value)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.warning(f"Profile lookup by {column} failed: {e}")
            return None
        return result.data[0] if result.data else None

    def _touch_last_login(self, user_id: str) -> None:
        try:
            self.admin.table("users")\
                .update({"last_login": _now()})\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.warning(f"Failed to update last_login (non-fatal): {e}")
