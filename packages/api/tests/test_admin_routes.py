# This project was developed with assistance from AI tools.
"""Tests for the admin proxy endpoints."""

import pytest
from fakes import JWT_SECRET, SERVICE_KEY
from fastapi.testclient import TestClient

from signal1.core.config import settings
from signal1.main import app
from signal1.services.users import UserAdminService, get_user_admin_service


@pytest.fixture
def client(fake, monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", JWT_SECRET)
    app.dependency_overrides[get_user_admin_service] = lambda: UserAdminService(fake.client(SERVICE_KEY))
    yield TestClient(app)
    app.dependency_overrides.clear()


def _headers_for(fake, role: str) -> tuple[str, dict]:
    user = fake.add_user(f"{role}-{len(fake.users)}@example.com", metadata={"role": role})
    fake.add_row("profiles", {"id": user["id"], "role": role, "full_name": role.title()})
    return user["id"], {"Authorization": f"Bearer {fake.mint_token(user['id'])}"}


@pytest.fixture
def admin(fake):
    return _headers_for(fake, "admin")


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def test_health_is_public(client):
    resp = client.get("/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_anonymous_request_gets_problem_details(client):
    """Auth failures use the RFC 7807 body."""
    resp = client.post("/admin/delete-user", json={"userId": "x"})
    assert resp.status_code == 401
    body = resp.json()
    assert body["title"] == "Unauthorized"
    assert body["detail"] == "Missing authentication token"
    assert resp.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.parametrize("role", ["lender", "broker"])
def test_non_admin_is_forbidden(client, fake, role):
    _, headers = _headers_for(fake, role)
    target_id, _ = _headers_for(fake, "lender")

    resp = client.post("/admin/delete-user", json={"userId": target_id}, headers=headers)

    assert resp.status_code == 403
    assert target_id in fake.users


# ---------------------------------------------------------------------------
# POST /admin/delete-user
# ---------------------------------------------------------------------------


def test_delete_user_requires_id(client, admin):
    _, headers = admin
    for kwargs in ({"json": {}}, {"json": {"userId": ""}}, {}):
        resp = client.post("/admin/delete-user", headers=headers, **kwargs)
        assert resp.status_code == 400
        assert resp.json() == {"error": "User ID required", "details": None}


def test_admin_cannot_delete_self(client, fake, admin):
    admin_id, headers = admin
    resp = client.post("/admin/delete-user", json={"userId": admin_id}, headers=headers)
    assert resp.status_code == 400
    assert admin_id in fake.users


def test_delete_user_removes_profile_role_rows_and_identity(client, fake, admin):
    """The profile delete cascades; the identity is removed afterwards."""
    _, headers = admin
    target_id, _ = _headers_for(fake, "broker")
    fake.add_row("brokers", {"id": target_id, "agency_name": "Agency"})
    fake.add_row("broker_files", {"broker_id": target_id, "file_url_path": f"{target_id}/1_a.pdf"})

    resp = client.post("/admin/delete-user", json={"userId": target_id}, headers=headers)

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert fake.rows("profiles", id=target_id) == []
    assert fake.rows("brokers") == []
    assert fake.rows("broker_files") == []
    assert target_id not in fake.users


def test_delete_unknown_identity_reports_provider_error(client, admin):
    _, headers = admin
    resp = client.post("/admin/delete-user", json={"userId": "no-such-user"}, headers=headers)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "User not found"
    assert body["details"]["status"] == 404


# ---------------------------------------------------------------------------
# POST /admin/set-user-role
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("payload", [{}, {"userId": "u1"}, {"role": "broker"}])
def test_set_user_role_requires_both_fields(client, admin, payload):
    _, headers = admin
    resp = client.post("/admin/set-user-role", json=payload, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing userId or role"


def test_set_user_role_rejects_unknown_role(client, fake, admin):
    _, headers = admin
    target_id, _ = _headers_for(fake, "lender")

    resp = client.post("/admin/set-user-role", json={"userId": target_id, "role": "owner"}, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid role 'owner'"
    assert fake.users[target_id]["user_metadata"]["role"] == "lender"


def test_set_user_role_updates_identity_metadata(client, fake, admin):
    _, headers = admin
    target_id, _ = _headers_for(fake, "lender")

    resp = client.post("/admin/set-user-role", json={"userId": target_id, "role": "broker"}, headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["user_metadata"]["role"] == "broker"
    assert fake.users[target_id]["user_metadata"]["role"] == "broker"


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


def test_startup_fails_without_service_role_key(monkeypatch):
    """The proxy refuses to start when it cannot act with the service role."""
    monkeypatch.setattr(settings, "SUPABASE_SERVICE_ROLE_KEY", None)
    with pytest.raises(RuntimeError, match="SUPABASE_SERVICE_ROLE_KEY"):
        with TestClient(app):
            pass
