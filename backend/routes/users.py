"""
User endpoints: registration, login and the current profile.

Flow:
  1) POST /api/users/register -> user + access token
  2) POST /api/users/login    -> user + access token
  3) GET  /api/users/profile  with Authorization: Bearer <token>
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from domain.responses import success_response
from middleware.auth import issue_access_token, require_user_id
from middleware.rate_limit import rate_limit
from models import LoginRequest, RegisterRequest
from services import user_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["users"])


def _auth_payload(user) -> dict:
    return {
        "user": user_service.user_to_dict(user),
        "token": issue_access_token(user_id=user.id, email=user.email),
        "token_type": "Bearer",
        "expires_in_seconds": settings.jwt_access_ttl_minutes * 60,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=10, window_seconds=60)),
):
    user = await user_service.register_user(
        db,
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    await db.commit()
    await db.refresh(user)
    return success_response(data=_auth_payload(user), meta={"message": "User registered successfully"})


@router.post("/login")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=20, window_seconds=60)),
):
    user = await user_service.authenticate(db, email=request.email, password=request.password)
    logger.info(f"User {user.id} logged in")
    return success_response(data=_auth_payload(user), meta={"message": "Login successful"})


@router.get("/profile")
async def profile(
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.get_user(db, user_id=user_id)
    return success_response(data=user_service.user_to_dict(user))
