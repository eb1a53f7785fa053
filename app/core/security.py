"""
Session token and password helpers.
Tokens are HS256 JWTs signed with settings.jwt_secret and carry the merged
profile fields (id, email, name, role) so routes never need a DB round trip.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

import bcrypt
import jwt

from app.config import settings

logger = logging.getLogger(__name__)

TOKEN_CLAIMS = ("id", "email", "name", "role")


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def create_token(payload: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    """Sign a session token for the given profile fields"""
    expire_minutes = expires_minutes or settings.jwt_expires_minutes
    now = datetime.now(timezone.utc)
    claims = {key: payload.get(key) for key in TOKEN_CLAIMS}
    claims["iat"] = now
    claims["exp"] = now + timedelta(minutes=expire_minutes)
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode a session token. Returns None if expired, tampered or malformed."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.debug("Token has expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        return None
