"""Token & Password Security — PyJWT access tokens and bcrypt password hashes.

Invariants:
    - decode_access_token never raises: any invalid, expired or malformed token
      (including unknown role claims) resolves to None
    - Password hashes are bcrypt; plaintext is never stored or logged
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
import jwt

from app.core.domain_types import AuthenticatedUser, Role, UserId

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def create_access_token(
    user: AuthenticatedUser,
    secret: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "id": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(
    token: str, secret: str, algorithm: str = "HS256",
) -> AuthenticatedUser | None:
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        logger.warning("Access token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Access token rejected: {e}")
        return None
    try:
        return AuthenticatedUser(
            id=UserId(UUID(str(claims["id"]))),
            role=Role(claims["role"]),
            email=claims.get("email", ""),
            first_name=claims.get("first_name", ""),
            last_name=claims.get("last_name", ""),
        )
    except (KeyError, ValueError) as e:
        logger.warning(f"Access token has invalid claims: {e}")
        return None
