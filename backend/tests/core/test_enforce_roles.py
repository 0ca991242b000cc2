"""Role Enforcement — tests for the pure access decision.

Tests:
    - No user -> UNAUTHENTICATED regardless of allow-list
    - Role outside the allow-list -> FORBIDDEN (no implicit hierarchy)
    - Role inside the allow-list -> GRANTED
    - normalize_roles accepts names and members, rejects unknown names
"""

from uuid import uuid4

import pytest

from app.core.domain_types import AccessDecision, AuthenticatedUser, Role
from app.core.enforce_roles import check_access, normalize_roles


def _user(role: Role) -> AuthenticatedUser:
    return AuthenticatedUser(id=uuid4(), role=role)


ADMIN_ONLY = frozenset({Role.ADMIN})


def test_missing_user_is_unauthenticated():
    assert check_access(None, ADMIN_ONLY) is AccessDecision.UNAUTHENTICATED


def test_missing_user_with_empty_allow_list_is_unauthenticated():
    assert check_access(None, frozenset()) is AccessDecision.UNAUTHENTICATED


def test_editor_on_admin_route_is_forbidden():
    assert check_access(_user(Role.EDITOR), ADMIN_ONLY) is AccessDecision.FORBIDDEN


def test_superadmin_does_not_imply_admin():
    assert check_access(_user(Role.SUPERADMIN), ADMIN_ONLY) is AccessDecision.FORBIDDEN


def test_admin_on_admin_route_is_granted():
    assert check_access(_user(Role.ADMIN), ADMIN_ONLY) is AccessDecision.GRANTED


def test_any_listed_role_is_granted():
    required = frozenset({Role.EDITOR, Role.ADMIN})
    assert check_access(_user(Role.EDITOR), required) is AccessDecision.GRANTED
    assert check_access(_user(Role.ADMIN), required) is AccessDecision.GRANTED
    assert check_access(_user(Role.USER), required) is AccessDecision.FORBIDDEN


def test_empty_allow_list_forbids_everyone():
    assert check_access(_user(Role.ADMIN), frozenset()) is AccessDecision.FORBIDDEN


def test_normalize_roles_accepts_strings_and_members():
    assert normalize_roles(["admin", Role.EDITOR, "admin"]) == frozenset(
        {Role.ADMIN, Role.EDITOR},
    )


def test_normalize_roles_rejects_unknown_role():
    with pytest.raises(ValueError):
        normalize_roles(["root"])
