"""User Change Tracking — pure diff between a stored user and an admin update.

Invariants:
    - Only fields whose value actually changes appear in the diff
    - Secret fields are masked in both "from" and "to"
    - Enum values are compared and reported by their string value
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

MASK = "********"
SECRET_FIELDS = frozenset({"password"})


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def diff_user_fields(
    current: Mapping[str, Any], updates: Mapping[str, Any],
) -> dict[str, dict[str, Any]]:
    changes: dict[str, dict[str, Any]] = {}
    for field_name, new_value in updates.items():
        if field_name in SECRET_FIELDS:
            if new_value:
                changes[field_name] = {"from": MASK, "to": MASK}
            continue
        old = _plain(current.get(field_name))
        new = _plain(new_value)
        if old != new:
            changes[field_name] = {"from": old, "to": new}
    return changes
