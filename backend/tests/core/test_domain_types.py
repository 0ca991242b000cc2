"""Domain Types — verifies enum values and the AuthenticatedUser value object.

Tests:
    - Role covers exactly the four account roles
    - str Enums compare equal to their stored DB value
    - AuthenticatedUser is frozen and exposes a display name
"""

import dataclasses
from uuid import uuid4

import pytest

from app.core.domain_types import (
    AccessDecision, AccountStatus, ActionType, AuthenticatedUser, Role, UserId,
)


def test_role_has_four_members():
    assert {r.value for r in Role} == {"user", "editor", "admin", "superadmin"}


def test_enums_compare_to_stored_strings():
    assert Role.ADMIN == "admin"
    assert AccountStatus.ACTIVE == "ACTIVE"
    assert ActionType.USER_DELETED.value == "USER_DELETED"


def test_access_decision_has_three_outcomes():
    assert len(AccessDecision) == 3


def test_authenticated_user_is_immutable():
    user = AuthenticatedUser(id=UserId(uuid4()), role=Role.USER)
    with pytest.raises(dataclasses.FrozenInstanceError):
        user.role = Role.ADMIN


def test_display_name_prefers_full_name():
    user = AuthenticatedUser(
        id=UserId(uuid4()), role=Role.USER,
        email="ana@example.com", first_name="Ana", last_name="Lima",
    )
    assert user.display_name == "Ana Lima"


def test_display_name_falls_back_to_email():
    user = AuthenticatedUser(
        id=UserId(uuid4()), role=Role.USER, email="ana@example.com",
    )
    assert user.display_name == "ana@example.com"
