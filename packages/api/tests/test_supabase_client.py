# This project was developed with assistance from AI tools.
"""Tests for the httpx-based Supabase client."""

import httpx
import pytest
from db.enums import UserRole
from fakes import ANON_KEY, SUPABASE_URL

from signal1.supabase import SupabaseClient, SupabaseError
from signal1.supabase.auth import generate_pkce_pair


def _client_for(handler) -> SupabaseClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseClient(SUPABASE_URL, ANON_KEY, http_client=http)


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_select_encodes_equality_filters_and_order():
    """Filters become PostgREST eq. params; enums and booleans render as stored."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["headers"] = request.headers
        return httpx.Response(200, json=[])

    client = _client_for(handler)
    await client.table("profiles").select(
        filters={"role": UserRole.BROKER, "read": False, "email": None},
        order="created_at",
        desc=True,
    )

    assert seen["params"] == {
        "role": "eq.broker",
        "read": "eq.false",
        "email": "is.null",
        "select": "*",
        "order": "created_at.desc",
    }
    assert seen["headers"]["apikey"] == ANON_KEY
    assert seen["headers"]["Authorization"] == f"Bearer {ANON_KEY}"


@pytest.mark.asyncio
async def test_access_token_replaces_api_key_in_authorization():
    """Once a user token is set, requests run as that user."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json=[])

    client = _client_for(handler)
    client.set_access_token("user-token")
    await client.table("profiles").select()
    assert seen["auth"] == "Bearer user-token"


@pytest.mark.asyncio
async def test_upsert_sends_merge_preference_and_conflict_target():
    """Upsert asks PostgREST to merge duplicates on the id column."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["prefer"] = request.headers["Prefer"]
        seen["params"] = dict(request.url.params)
        return httpx.Response(201, json=[{"id": "u1"}])

    client = _client_for(handler)
    rows = await client.table("lenders").upsert({"id": "u1", "company_name": "Acme"})

    assert rows == [{"id": "u1"}]
    assert "resolution=merge-duplicates" in seen["prefer"]
    assert seen["params"] == {"on_conflict": "id"}


@pytest.mark.asyncio
async def test_update_and_delete_require_filters():
    """Unfiltered update/delete are refused before any request."""
    client = _client_for(lambda request: pytest.fail("no request expected"))
    with pytest.raises(ValueError):
        await client.table("profiles").update({"role": "admin"}, filters={})
    with pytest.raises(ValueError):
        await client.table("profiles").delete(filters={})


@pytest.mark.asyncio
async def test_count_reads_content_range(fake):
    """count() returns the total from the Content-Range header."""
    fake.add_row("lenders", {"id": "a"})
    fake.add_row("lenders", {"id": "b"})
    client = fake.client()
    assert await client.table("lenders").count() == 2
    assert await client.table("brokers").count() == 0


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_postgrest_error_is_parsed():
    """PostgREST message/code/details land on SupabaseError."""

    def handler(request):
        return httpx.Response(
            409,
            json={"code": "23505", "message": "duplicate key", "details": "Key (id) exists"},
        )

    client = _client_for(handler)
    with pytest.raises(SupabaseError) as exc_info:
        await client.table("profiles").insert({"id": "x"})

    err = exc_info.value
    assert err.status == 409
    assert err.code == "23505"
    assert err.message == "duplicate key"
    assert err.details == "Key (id) exists"


@pytest.mark.asyncio
async def test_gotrue_error_description_is_preferred():
    """GoTrue's error_description is the human-readable message."""

    def handler(request):
        return httpx.Response(
            400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"}
        )

    client = _client_for(handler)
    with pytest.raises(SupabaseError) as exc_info:
        await client.auth.sign_in_with_password("a@b.c", "nope")
    assert exc_info.value.message == "Invalid login credentials"
    assert exc_info.value.code == "invalid_grant"


@pytest.mark.asyncio
async def test_network_error_has_status_zero():
    """Transport failures surface as SupabaseError with status 0."""

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client_for(handler)
    with pytest.raises(SupabaseError) as exc_info:
        await client.table("profiles").select()
    assert exc_info.value.status == 0
    assert "Network error" in exc_info.value.message


def test_from_settings_requires_service_key_for_service_role(cfg):
    """A service-role client cannot be built without the key."""
    with pytest.raises(RuntimeError, match="SUPABASE_SERVICE_ROLE_KEY"):
        SupabaseClient.from_settings(cfg, service_role=True)


# ---------------------------------------------------------------------------
# Auth and storage helpers
# ---------------------------------------------------------------------------


def test_pkce_pair_is_s256():
    """The challenge is the unpadded base64url SHA-256 of the verifier."""
    import base64
    import hashlib

    verifier, challenge = generate_pkce_pair()
    expected = base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest()).rstrip(b"=")
    assert challenge == expected.decode()


def test_authorize_url_carries_provider_and_redirect(fake):
    """The OAuth authorize URL targets GoTrue with the PKCE challenge."""
    client = fake.client()
    url = httpx.URL(client.auth.authorize_url("google", "http://portal.test/", "abc"))
    assert url.path == "/auth/v1/authorize"
    assert url.params["provider"] == "google"
    assert url.params["redirect_to"] == "http://portal.test/"
    assert url.params["code_challenge"] == "abc"
    assert url.params["code_challenge_method"] == "s256"


@pytest.mark.asyncio
async def test_storage_round_trip_and_signed_url(fake):
    """Upload, sign and remove an object."""
    client = fake.client()
    await client.storage.upload("broker_files", "u1/1_a.pdf", b"%PDF", "application/pdf")
    assert fake.objects[("broker_files", "u1/1_a.pdf")] == b"%PDF"

    signed = await client.storage.create_signed_url("broker_files", "u1/1_a.pdf", 60)
    assert signed.startswith(f"{SUPABASE_URL}/storage/v1/object/sign/broker_files/u1/1_a.pdf")

    removed = await client.storage.remove("broker_files", ["u1/1_a.pdf"])
    assert removed == [{"name": "u1/1_a.pdf", "bucket_id": "broker_files"}]
    assert fake.objects == {}