"""Domain Types — closed enumerations and value objects shared across layers.

Invariants:
    - Roles, account statuses, video types and audit actions are closed str Enums
      (no raw string matching against role names anywhere in the code base)
    - AuthenticatedUser is immutable once built by the authentication step

Design Decisions:
    - str Enums: serialize to JSON and compare equal to their stored DB value
    - UserId as NewType over UUID: zero runtime cost, type-checker support
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
VideoId = NewType("VideoId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Every role a user account can hold. No implicit hierarchy."""
    USER = "user"
    EDITOR = "editor"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class AccountStatus(str, Enum):
    """Account lifecycle states — maps to users.account_status."""
    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"
    LOCKED = "LOCKED"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


class VideoType(str, Enum):
    SHORT = "short"
    MUSIC = "music"
    PODCAST = "podcast"


class ActionType(str, Enum):
    """Audit trail entries written to action_logs."""
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    ADMIN_ROLE_GRANTED = "ADMIN_ROLE_GRANTED"
    SHORT_CREATED = "SHORT_CREATED"
    ORPHANS_SWEPT = "ORPHANS_SWEPT"


class AccessDecision(str, Enum):
    """Outcome of a role gate evaluation."""
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    GRANTED = "granted"


class UploadState(str, Enum):
    """Upload pipeline stages, surfaced in logs."""
    RECEIVING = "receiving"
    VALIDATING = "validating"
    ACCEPTED = "accepted"
    WRITING = "writing"
    STORED = "stored"
    REJECTED = "rejected"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class AuthenticatedUser:
    """Caller identity resolved from a verified access token."""
    id: UserId
    role: Role
    email: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email
