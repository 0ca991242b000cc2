"""Auth Routes — issues and clears the JWT access token cookie.

Invariants:
    - Only ACTIVE accounts with a matching bcrypt password get a token
    - The token is returned in the body and set as an httponly cookie
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.config import Settings, get_settings
from app.core.domain_types import ActionType, AuthenticatedUser
from app.infrastructure.database import get_db
from app.infrastructure.security import create_access_token
from app.schemas.user import LoginRequest
from app.services import user_admin
from app.services.audit import record_action

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    user = await user_admin.authenticate(db, body.email, body.password)
    identity = user_admin.to_authenticated_user(user)
    token = create_access_token(
        identity, settings.jwt_secret, settings.jwt_algorithm,
        settings.jwt_expires_minutes,
    )
    response.set_cookie(
        settings.auth_cookie_name, token,
        max_age=settings.jwt_expires_minutes * 60,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )
    return {
        "success": True,
        "token": token,
        "user": {
            "id": str(identity.id),
            "email": identity.email,
            "role": identity.role.value,
        },
    }


@router.post("/logout")
async def logout(
    response: Response,
    user: AuthenticatedUser | None = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    if user:
        record_action(
            db, ActionType.LOGOUT, f"User {user.email} logged out",
            user_id=user.id, created_by=user.id,
        )
        await db.commit()
    response.delete_cookie(settings.auth_cookie_name)
    return {"success": True, "message": "Logged out"}
