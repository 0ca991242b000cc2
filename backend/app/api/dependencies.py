"""Auth Dependencies — authentication step and the role gate as FastAPI dependencies.

Invariants:
    - get_current_user is the only place a caller identity is resolved; it returns
      None for anonymous or invalid tokens and never raises
    - A valid signature only names the subject: the users row supplies the role,
      and a deleted or non-ACTIVE account resolves to None
    - The gate reads the user it is handed, never ambient request state
    - UNAUTHENTICATED -> NotAuthenticatedError (login redirect)
      FORBIDDEN -> AccessDeniedError (403), route body never runs
      GRANTED -> user stored on request.state.current_user and returned
    - authorize() returns the same dependency object for the same role set, so
      FastAPI's per-request dependency cache evaluates each gate once

Design Decisions:
    - Bearer header first, then the auth cookie: API clients and browser pages
      share one code path
"""

import logging
from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.domain_types import AccessDecision, AuthenticatedUser, Role
from app.core.enforce_roles import check_access, normalize_roles
from app.core.errors import AccessDeniedError, NotAuthenticatedError
from app.infrastructure.database import get_db
from app.infrastructure.security import decode_access_token
from app.services.user_admin import load_active_identity

logger = logging.getLogger(__name__)


def extract_token(request: Request, cookie_name: str) -> str | None:
    header = request.headers.get("authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    return request.cookies.get(cookie_name) or None


async def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser | None:
    token = extract_token(request, settings.auth_cookie_name)
    if not token:
        return None
    claims = decode_access_token(
        token, settings.jwt_secret, settings.jwt_algorithm,
    )
    if claims is None:
        return None
    # role and status are read from the users row, never from the token
    return await load_active_identity(db, claims.id)


def authorize(*roles: Role | str):
    """Build (or reuse) the gate dependency for an allow-list of roles."""
    return _gate_for(normalize_roles(roles))


@lru_cache
def _gate_for(required: frozenset[Role]):
    required_names = sorted(r.value for r in required)

    async def role_gate(
        request: Request,
        user: AuthenticatedUser | None = Depends(get_current_user),
        settings: Settings = Depends(get_settings),
    ) -> AuthenticatedUser:
        decision = check_access(user, required)
        logger.info(
            f"Role gate {decision.value} on {request.url.path}",
            extra={
                "decision": decision.value,
                "required_roles": required_names,
                "role": user.role.value if user else None,
                "user_id": str(user.id) if user else None,
            },
        )
        if decision is AccessDecision.UNAUTHENTICATED:
            raise NotAuthenticatedError(settings.login_url)
        if decision is AccessDecision.FORBIDDEN:
            raise AccessDeniedError(user.role.value, required_names)
        request.state.current_user = user
        return user

    role_gate.__name__ = f"role_gate_{'_'.join(required_names)}"
    return role_gate


require_admin = authorize(Role.ADMIN)
