"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (payload: sub, username, role)
- FastAPI dependencies for protected routes and role checks
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import text

from app.core.config import get_settings
from app.core.errors import AuthenticationError, AuthorizationError
from app.db.postgres import get_db_session

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; missing headers are reported by get_current_admin
bearer_scheme = HTTPBearer(auto_error=False)

ROLES = ("super_admin", "admin", "manager")


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def token_for_admin(admin: dict) -> str:
    return create_access_token({
        "sub": str(admin["admin_id"]),
        "username": admin["username"],
        "role": admin["role"],
    })


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """
    FastAPI dependency - Get current authenticated admin.

    Usage:
        @router.post("/protected")
        async def route(admin: dict = Depends(get_current_admin)):
            return admin
    """
    if credentials is None:
        raise AuthenticationError("Access token required")

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")

    # Verify admin still exists and is active
    with get_db_session() as db:
        result = db.execute(
            text("SELECT admin_id, username, email, role, is_active FROM admins WHERE admin_id = :id"),
            {"id": int(payload["sub"])}
        )
        admin = result.fetchone()

    if not admin:
        raise AuthenticationError("Invalid or expired token")

    if not admin[4]:  # is_active
        raise AuthorizationError("Account deactivated")

    return {"admin_id": admin[0], "username": admin[1], "email": admin[2], "role": admin[3]}


def require_roles(*roles: str):
    """Dependency factory - allow only the given roles."""
    async def checker(admin: dict = Depends(get_current_admin)) -> dict:
        if admin["role"] not in roles:
            raise AuthorizationError(f"Requires role: {', '.join(roles)}")
        return admin
    return checker


# Deletes are reserved for these roles
require_delete_role = require_roles("super_admin", "admin")
