"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.config.roles_config import get_role_permissions
from app.core.security import verify_token
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 rather than FastAPI's default
security = HTTPBearer(auto_error=False)

DEV_USER: Dict[str, Any] = {
    "id": "dev-user-1",
    "email": "dev@example.com",
    "name": "Developer",
    "role": "admin",
}


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Dict[str, Any]:
    """Extract current user info from the session token"""
    if settings.dev_bypass_auth:
        return dict(DEV_USER)
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required"
        )
    payload = verify_token(credentials.credentials)
    if not payload or not payload.get("id"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token"
        )
    return payload


def has_permission(user_data: Dict[str, Any], permission: str) -> bool:
    return permission in get_role_permissions(user_data.get("role") or "")


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(user_data: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        """Dependency to check the token's role grants the required permission"""
        if not has_permission(user_data, required_permission):
            logger.info(
                f"Denied {required_permission} to user {user_data.get('id')} with role {user_data.get('role')}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return user_data
    return check_permission
