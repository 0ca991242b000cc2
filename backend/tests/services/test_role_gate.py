"""Role Gate — route-level behaviour of authorize() and the admin route table.

Tests:
    - No user -> 302 to the login page, route body never runs
    - Authenticated role outside the allow-list -> 403 plain-text denial
    - Allowed role -> route body runs exactly once with the user in request.state
    - Expired or forged tokens behave like no token
    - Role and account status come from the users row, not the token claims
"""

from uuid import uuid4

import pytest
from fastapi import Depends, FastAPI, Request
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import authorize, require_admin
from app.api.error_handlers import register_error_handlers
from app.api.routes.admin_users import ADMIN_ROUTES
from app.config import get_settings
from app.infrastructure.database import get_db
from app.core.domain_types import AccountStatus, Role
from app.core.errors import ACCESS_DENIED_MESSAGE
from app.infrastructure.security import create_access_token
from app.services.user_admin import to_authenticated_user


# ─── Gate on a standalone app ───────────────────────────────────

@pytest.fixture
def gated_app(test_settings, test_session_factory):
    calls = []
    gate_app = FastAPI()
    register_error_handlers(gate_app)

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    gate_app.dependency_overrides[get_db] = override_get_db
    gate_app.dependency_overrides[get_settings] = lambda: test_settings

    @gate_app.get(
        "/editorial",
        dependencies=[Depends(authorize(Role.EDITOR, Role.ADMIN))],
    )
    async def editorial(
        request: Request,
        user=Depends(authorize("admin", "editor")),
    ):
        calls.append((user, request.state.current_user))
        return {"role": user.role.value}

    return gate_app, calls


@pytest.fixture
async def gated_client(gated_app):
    gate_app, calls = gated_app
    async with AsyncClient(
        transport=ASGITransport(app=gate_app), base_url="http://test",
    ) as c:
        yield c, calls


def test_same_role_set_reuses_one_gate():
    assert authorize(Role.ADMIN, Role.EDITOR) is authorize("editor", "admin")
    assert authorize(Role.ADMIN) is require_admin


def test_unknown_role_name_fails_at_declaration():
    with pytest.raises(ValueError):
        authorize("root")


async def test_anonymous_is_redirected_to_login(gated_client):
    client, calls = gated_client
    resp = await client.get("/editorial")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login"
    assert calls == []


async def test_user_role_is_denied(gated_client, make_user, auth_headers):
    client, calls = gated_client
    user = await make_user("plain@throwback.com", Role.USER)
    resp = await client.get("/editorial", headers=auth_headers(user))
    assert resp.status_code == 403
    assert resp.text == ACCESS_DENIED_MESSAGE
    assert calls == []


async def test_allowed_role_runs_body_once(gated_client, editor_user, auth_headers):
    client, calls = gated_client
    resp = await client.get("/editorial", headers=auth_headers(editor_user))
    assert resp.status_code == 200
    assert resp.json() == {"role": "editor"}
    assert len(calls) == 1
    user, state_user = calls[0]
    assert user is state_user
    assert user.id == editor_user.id


async def test_token_cookie_is_accepted(gated_client, test_settings, editor_user):
    client, calls = gated_client
    token = create_access_token(
        to_authenticated_user(editor_user), test_settings.jwt_secret,
    )
    resp = await client.get(
        "/editorial", headers={"Cookie": f"{test_settings.auth_cookie_name}={token}"},
    )
    assert resp.status_code == 200
    assert len(calls) == 1


async def test_expired_token_redirects(gated_client, test_settings, editor_user):
    client, calls = gated_client
    token = create_access_token(
        to_authenticated_user(editor_user), test_settings.jwt_secret,
        expires_minutes=-1,
    )
    resp = await client.get(
        "/editorial", headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 302
    assert calls == []


async def test_forged_token_redirects(gated_client, editor_user):
    client, calls = gated_client
    token = create_access_token(to_authenticated_user(editor_user), "not-the-secret")
    resp = await client.get(
        "/editorial", headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 302


# ─── Admin route table ──────────────────────────────────────────

def test_admin_route_table_is_admin_only():
    assert {(b.method, b.path) for b in ADMIN_ROUTES} == {
        ("PUT", "/users/{user_id}"),
        ("DELETE", "/users/{user_id}"),
        ("PUT", "/update-admin-role"),
    }
    assert all(b.required_roles == frozenset({Role.ADMIN}) for b in ADMIN_ROUTES)


@pytest.mark.parametrize("method,path", [
    ("PUT", f"/users/{uuid4()}"),
    ("DELETE", f"/users/{uuid4()}"),
    ("PUT", "/update-admin-role"),
])
async def test_admin_routes_redirect_anonymous(client, method, path):
    resp = await client.request(method, path, json={"first_name": "X"})
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login"


async def test_editor_is_denied_on_user_update(client, editor_user, make_user, auth_headers):
    target = await make_user("target@throwback.com", first_name="Before")
    resp = await client.put(
        f"/users/{target.id}",
        json={"first_name": "After"},
        headers=auth_headers(editor_user),
    )
    assert resp.status_code == 403
    assert "Accès refusé" in resp.text


# ─── Identity is re-read from the users row ─────────────────────

@pytest.fixture
async def second_admin(make_user):
    return await make_user("second@throwback.com", Role.ADMIN)


async def test_demoted_admin_token_is_denied(client, admin_headers, second_admin, auth_headers):
    headers = auth_headers(second_admin)
    assert (await client.get("/api/admin/users", headers=headers)).status_code == 200

    resp = await client.put(
        f"/users/{second_admin.id}", json={"role": "user"}, headers=admin_headers,
    )
    assert resp.status_code == 200

    resp = await client.get("/api/admin/users", headers=headers)
    assert resp.status_code == 403


async def test_deleted_admin_token_is_unauthenticated(client, admin_headers, second_admin, auth_headers):
    headers = auth_headers(second_admin)
    resp = await client.delete(f"/users/{second_admin.id}", headers=admin_headers)
    assert resp.status_code == 200

    resp = await client.get("/api/admin/users", headers=headers)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login"


async def test_suspended_admin_token_is_unauthenticated(client, admin_headers, second_admin, auth_headers):
    headers = auth_headers(second_admin)
    resp = await client.put(
        f"/users/{second_admin.id}",
        json={"account_status": AccountStatus.SUSPENDED.value},
        headers=admin_headers,
    )
    assert resp.status_code == 200

    resp = await client.get("/api/admin/users", headers=headers)
    assert resp.status_code == 302


async def test_promoted_user_gains_access_without_new_token(client, make_user, auth_headers, admin_headers):
    editor = await make_user("rising@throwback.com", Role.EDITOR)
    headers = auth_headers(editor)
    assert (await client.get("/api/admin/users", headers=headers)).status_code == 403

    await client.put(f"/users/{editor.id}", json={"role": "admin"}, headers=admin_headers)

    assert (await client.get("/api/admin/users", headers=headers)).status_code == 200
