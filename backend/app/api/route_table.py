"""Route Table — declarative (verb, path, roles, handler) bindings.

Invariants:
    - Bindings are frozen and built at import time
    - Every binding is registered behind authorize(*required_roles)
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Depends

from app.api.dependencies import authorize
from app.core.domain_types import Role


@dataclass(frozen=True)
class RouteBinding:
    method: str
    path: str
    required_roles: frozenset[Role]
    handler: Callable[..., Any]
    status_code: int = 200


def register_route_table(
    router: APIRouter, bindings: Iterable[RouteBinding],
) -> None:
    for binding in bindings:
        router.add_api_route(
            binding.path,
            binding.handler,
            methods=[binding.method],
            status_code=binding.status_code,
            dependencies=[Depends(authorize(*binding.required_roles))],
        )
