"""
Security utilities for authentication and authorization
Handles JWT tokens, password hashing, and permission checks
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import secrets
import logging

from .config import settings
from .exceptions import UnauthorizedException, ForbiddenException

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Security scheme; missing credentials are reported as 401 by the dependencies below
security = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"

class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash password using bcrypt"""
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
        """Create JWT access token"""
        to_encode = data.copy()
        minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
        expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
        to_encode.update({"exp": expire, "type": "access"})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def create_admin_token(username: str) -> str:
        """Create JWT for the configured admin account"""
        return SecurityUtils.create_access_token(
            {"sub": f"admin:{username}", "username": username, "role": ADMIN_ROLE},
            expires_minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES
        )

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """Decode and validate JWT token"""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except ExpiredSignatureError:
            raise UnauthorizedException("Token has expired", error_code="TOKEN_EXPIRED")
        except JWTError:
            raise UnauthorizedException("Invalid authentication credentials", error_code="INVALID_TOKEN")

        if payload.get("type") != "access" or not payload.get("sub"):
            raise UnauthorizedException("Invalid token type", error_code="INVALID_TOKEN")
        return payload

    @staticmethod
    def authenticate_admin(username: str, password: str) -> bool:
        """Check the configured admin credential pair"""
        if not settings.ADMIN_PASSWORD_HASH:
            logger.warning("Admin login attempted but ADMIN_PASSWORD_HASH is not configured")
            return False
        if not secrets.compare_digest(username, settings.ADMIN_USERNAME):
            return False
        return SecurityUtils.verify_password(password, settings.ADMIN_PASSWORD_HASH)

def principal_from_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(payload.get("sub")),
        "role": payload.get("role"),
        "email": payload.get("email"),
        "username": payload.get("username"),
    }

# Dependency to get current user from token
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Dict[str, Any]:
    """Extract and validate user from JWT token"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Missing authentication token", error_code="UNAUTHENTICATED")

    payload = SecurityUtils.decode_token(credentials.credentials)
    principal = principal_from_payload(payload)

    # Rate limiter keys on this when present
    request.state.user_id = principal["id"]
    return principal

def is_admin(principal: Dict[str, Any]) -> bool:
    return principal.get("role") == ADMIN_ROLE

def ensure_owner(principal: Dict[str, Any], user_id: str) -> None:
    """Raise unless the caller owns the resource or is an admin"""
    if is_admin(principal):
        return
    if principal.get("id") != str(user_id):
        logger.warning(f"User {principal.get('id')} denied access to resources of {user_id}")
        raise ForbiddenException("You can only access your own earnings")

async def require_owner(
    user_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> Dict[str, Any]:
    """Path-bound ownership check for /{user_id} routes"""
    ensure_owner(current_user, user_id)
    return current_user

async def require_admin(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> Dict[str, Any]:
    """Admin-only routes"""
    if not is_admin(current_user):
        raise ForbiddenException("Admin privileges required")
    return current_user
