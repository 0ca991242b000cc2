"""Admin User Routes — the admin route table plus read-only user listing.

Invariants:
    - ADMIN_ROUTES is the declarative table for PUT /users/{id}, DELETE /users/{id}
      and PUT /update-admin-role, each behind the admin role gate
    - Handlers only translate HTTP <-> services/user_admin.py
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import require_admin
from app.api.route_table import RouteBinding, register_route_table
from app.config import Settings, get_settings
from app.core.domain_types import AccountStatus, AuthenticatedUser, Role
from app.infrastructure.database import get_db
from app.schemas.user import UserResponse, UserUpdate
from app.services import user_admin

logger = logging.getLogger(__name__)

ADMIN_ONLY = frozenset({Role.ADMIN})


def _serialize(user) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")


async def update_user(
    user_id: UUID,
    body: UserUpdate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a user account."""
    user, changes = await user_admin.update_user(db, user_id, body, admin)
    return {
        "success": True,
        "message": "User updated successfully",
        "changes": sorted(changes),
        "user": _serialize(user),
    }


async def delete_user(
    user_id: UUID,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Hard-delete a user account (never the caller's own)."""
    await user_admin.delete_user(db, user_id, admin)
    return {"success": True, "message": "User deleted successfully"}


async def update_admin_role(
    admin: AuthenticatedUser = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    """Grant the admin role to the bootstrap admin account."""
    user = await user_admin.grant_bootstrap_admin(
        db, settings.bootstrap_admin_email, admin,
    )
    return {
        "success": True,
        "message": "Admin role updated successfully",
        "user": _serialize(user),
    }


ADMIN_ROUTES: tuple[RouteBinding, ...] = (
    RouteBinding("PUT", "/users/{user_id}", ADMIN_ONLY, update_user),
    RouteBinding("DELETE", "/users/{user_id}", ADMIN_ONLY, delete_user),
    RouteBinding("PUT", "/update-admin-role", ADMIN_ONLY, update_admin_role),
)

router = APIRouter(tags=["admin"])
register_route_table(router, ADMIN_ROUTES)


# ─── Read-only listing (/api/admin) ─────────────────────────────

api_router = APIRouter(prefix="/api/admin/users", tags=["admin"])


@api_router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None, max_length=100),
    status_filter: AccountStatus | None = Query(None, alias="status"),
    role: Role | None = Query(None),
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List users with pagination and optional filters."""
    users, total = await user_admin.list_users(
        db, page=page, limit=limit, search=search,
        status_filter=status_filter, role=role,
    )
    return {
        "success": True,
        "users": [_serialize(u) for u in users],
        "current_page": page,
        "total_pages": (total + limit - 1) // limit,
        "total": total,
    }


@api_router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Get one user's details."""
    user = await user_admin.get_user_or_404(db, user_id)
    return {"success": True, "user": _serialize(user)}
