"""
Authentication Routes

POST /auth/register - Register new admin account
POST /auth/login - Login with username or email and get JWT token
GET /auth/profile - Get current admin info
"""

import logging

from fastapi import APIRouter, Depends

from app.core.auth import hash_password, verify_password, token_for_admin, get_current_admin
from app.core.errors import AuthenticationError, AuthorizationError
from app.db.postgres import run_in_transaction
from app.repositories.admins import admin_repository
from app.schemas.schemas import (
    RegisterRequest, LoginRequest, AdminResponse, TokenData, DataResponse, CreatedResponse, CreatedData
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=CreatedResponse, status_code=201)
def register(request: RegisterRequest):
    """
    Register a new admin account.

    After registration, login to get access token.
    """
    admin_id = run_in_transaction(admin_repository.create, {
        "username": request.username,
        "email": request.email,
        "password_hash": hash_password(request.password),
        "role": request.role.value,
    })
    logger.info("Admin '%s' registered as %s", request.username, request.role.value)
    return CreatedResponse(message="Admin registered successfully. Please login.", data=CreatedData(id=admin_id))


@router.post("/login", response_model=DataResponse[TokenData])
def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    admin = run_in_transaction(admin_repository.find_for_login, request.username)

    if not admin or not verify_password(request.password, admin["password_hash"]):
        raise AuthenticationError("Invalid credentials")

    if not admin["is_active"]:
        raise AuthorizationError("Account deactivated")

    run_in_transaction(admin_repository.touch_last_login, admin["admin_id"])
    profile = run_in_transaction(admin_repository.get, admin["admin_id"])
    return {"data": {"access_token": token_for_admin(admin), "admin": profile}}


@router.get("/profile", response_model=DataResponse[AdminResponse])
def get_profile(admin: dict = Depends(get_current_admin)):
    """Get current authenticated admin's info."""
    return {"data": run_in_transaction(admin_repository.get, admin["admin_id"])}
