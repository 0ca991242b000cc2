"""Role Enforcement — pure access decision for role-gated routes.

Invariants:
    - check_access is PURE: no IO, no logging, no request object
    - Role comparison is exact set membership; SUPERADMIN does not imply ADMIN
    - Absence of a user always yields UNAUTHENTICATED, whatever the allow-list

Design Decisions:
    - Decision enum instead of exceptions: the imperative shell (api/dependencies.py)
      maps each decision to a response, tests assert on plain values
"""

from collections.abc import Iterable

from app.core.domain_types import AccessDecision, AuthenticatedUser, Role


def normalize_roles(roles: Iterable[Role | str]) -> frozenset[Role]:
    """Coerce an allow-list to Role members. Unknown names raise ValueError."""
    return frozenset(Role(r) for r in roles)


def check_access(
    user: AuthenticatedUser | None, required_roles: frozenset[Role],
) -> AccessDecision:
    if user is None:
        return AccessDecision.UNAUTHENTICATED
    if user.role not in required_roles:
        return AccessDecision.FORBIDDEN
    return AccessDecision.GRANTED
