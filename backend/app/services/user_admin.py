"""User Administration — account queries and mutations behind the admin routes.

Invariants:
    - Email stays unique across accounts (checked before flush)
    - An admin can never delete their own account
    - Every effective mutation writes one ActionLog entry in the same transaction
    - Passwords are re-hashed; the change set only ever shows a mask

Design Decisions:
    - Functions take an AsyncSession and commit themselves: routes stay thin
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import AccountStatus, ActionType, AuthenticatedUser, Role
from app.core.errors import (
    AccountInactiveError,
    EmailAlreadyUsedError,
    InvalidCredentialsError,
    ResourceNotFoundError,
    SelfDeletionError,
)
from app.core.user_changes import diff_user_fields
from app.infrastructure.security import hash_password, verify_password
from app.models.user import User
from app.schemas.user import UserUpdate
from app.services.audit import record_action

logger = logging.getLogger(__name__)

_NON_NULLABLE_FIELDS = frozenset({
    "email", "role", "account_status", "is_verified", "is_private", "password",
})


LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    """Search terms match literally: % and _ lose their wildcard meaning."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _plain(value):
    return value.value if isinstance(value, (Role, AccountStatus)) else value


def to_authenticated_user(user: User) -> AuthenticatedUser:
    return AuthenticatedUser(
        id=user.id,
        role=Role(user.role),
        email=user.email,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
    )


async def load_active_identity(
    db: AsyncSession, user_id: UUID,
) -> AuthenticatedUser | None:
    """Current identity for a token subject; None if gone, not ACTIVE or mis-roled."""
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        logger.warning(f"Token subject {user_id} no longer exists")
        return None
    if user.account_status != AccountStatus.ACTIVE.value:
        logger.warning(
            f"Token subject {user_id} is {user.account_status}",
            extra={"user_id": str(user_id)},
        )
        return None
    try:
        return to_authenticated_user(user)
    except ValueError:
        logger.error(f"User {user_id} has unknown role {user.role!r}")
        return None


async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise ResourceNotFoundError("User", str(user_id))
    return user


async def list_users(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    status_filter: AccountStatus | None = None,
    role: Role | None = None,
) -> tuple[list[User], int]:
    """Return one page of users (newest first) and the filtered total."""
    conditions = []
    if search:
        pattern = f"%{_escape_like(search)}%"
        conditions.append(or_(
            User.first_name.ilike(pattern, escape=LIKE_ESCAPE),
            User.last_name.ilike(pattern, escape=LIKE_ESCAPE),
            User.email.ilike(pattern, escape=LIKE_ESCAPE),
        ))
    if status_filter:
        conditions.append(User.account_status == status_filter.value)
    if role:
        conditions.append(User.role == role.value)

    total = (await db.execute(
        select(func.count()).select_from(User).where(*conditions),
    )).scalar_one()
    result = await db.execute(
        select(User)
        .where(*conditions)
        .order_by(User.created_at.desc())
        .limit(limit)
        .offset((page - 1) * limit),
    )
    return list(result.scalars().all()), total


async def update_user(
    db: AsyncSession, user_id: UUID, body: UserUpdate, actor: AuthenticatedUser,
) -> tuple[User, dict]:
    user = await get_user_or_404(db, user_id)
    updates = {
        name: value
        for name, value in body.model_dump(exclude_unset=True).items()
        if value is not None or name not in _NON_NULLABLE_FIELDS
    }

    new_email = updates.get("email")
    if new_email and new_email != user.email:
        clash = await db.execute(
            select(User.id).where(User.email == new_email, User.id != user_id),
        )
        if clash.scalar_one_or_none() is not None:
            raise EmailAlreadyUsedError(new_email)

    current = {name: getattr(user, name, None) for name in updates}
    changes = diff_user_fields(current, updates)

    password = updates.pop("password", None)
    for name, value in updates.items():
        setattr(user, name, _plain(value))
    if password and password.strip():
        user.password_hash = hash_password(password)

    user.modified_at = datetime.now(timezone.utc)
    user.modified_by = str(actor.id)

    if changes:
        record_action(
            db, ActionType.USER_UPDATED,
            f"User {user.first_name or ''} {user.last_name or ''} ({user.email}) updated",
            user_id=user.id, created_by=actor.id,
            extra={"changes": changes},
        )
    await db.commit()
    await db.refresh(user)
    return user, changes


async def delete_user(
    db: AsyncSession, user_id: UUID, actor: AuthenticatedUser,
) -> None:
    user = await get_user_or_404(db, user_id)
    if user.id == actor.id:
        raise SelfDeletionError()
    await db.delete(user)
    record_action(
        db, ActionType.USER_DELETED,
        f"User {user.first_name or ''} {user.last_name or ''} ({user.email}) deleted",
        created_by=actor.id,
        extra={"deleted_user_id": str(user_id)},
    )
    await db.commit()


async def grant_bootstrap_admin(
    db: AsyncSession, email: str, actor: AuthenticatedUser,
) -> User:
    """Promote the well-known bootstrap account to admin."""
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()
    if not user:
        raise ResourceNotFoundError("Admin user", email)
    user.role = Role.ADMIN.value
    user.modified_at = datetime.now(timezone.utc)
    user.modified_by = str(actor.id)
    record_action(
        db, ActionType.ADMIN_ROLE_GRANTED,
        f"Admin role granted to {email}",
        user_id=user.id, created_by=actor.id,
    )
    await db.commit()
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()
    if user.account_status != AccountStatus.ACTIVE.value:
        raise AccountInactiveError(user.account_status)
    user.last_login_at = datetime.now(timezone.utc)
    record_action(
        db, ActionType.LOGIN, f"User {user.email} logged in",
        user_id=user.id, created_by=user.id,
    )
    await db.commit()
    return user
