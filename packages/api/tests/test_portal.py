# This project was developed with assistance from AI tools.
"""End-to-end portal flows: sign-up, routing, profile banner and admin proxy."""

import httpx
import pytest
from fakes import JWT_SECRET, SERVICE_KEY

from signal1.core.config import settings
from signal1.main import app
from signal1.schemas.access import BootstrapStatus, GateState, ProfileStatus
from signal1.schemas.auth import Session
from signal1.schemas.file import FileUpload
from signal1.services.admin_proxy import AdminProxyClient, AdminProxyError
from signal1.services.files import FileValidationError
from signal1.services.portal import Portal
from signal1.services.users import UserAdminService, get_user_admin_service


@pytest.fixture
def proxy_app(fake, monkeypatch):
    """The real admin proxy app, backed by the in-memory Supabase."""
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", JWT_SECRET)
    app.dependency_overrides[get_user_admin_service] = lambda: UserAdminService(fake.client(SERVICE_KEY))
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def portal(fake, cfg, sleeper, proxy_app):
    client = fake.client()
    proxy = AdminProxyClient(
        cfg.ADMIN_PROXY_URL,
        token_provider=lambda: client.access_token,
        http_client=httpx.AsyncClient(transport=httpx.ASGITransport(app=proxy_app)),
    )
    return Portal(client, cfg=cfg, proxy=proxy, sleep=sleeper)


# ---------------------------------------------------------------------------
# Sign-up and routing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_broker_sign_up_lands_on_broker_dashboard(fake, portal):
    """Sign-up provisions the profile and /dashboard forwards by role."""
    await portal.start()
    result = await portal.sign_up(
        "bea@example.com", "secret123", {"full_name": "Bea", "role": "broker", "country": "US"}
    )
    assert result.ok
    assert portal.bootstrap_result.status == BootstrapStatus.READY

    assert (await portal.navigate("/dashboard")).redirect_to == "/dashboard/broker"
    assert (await portal.navigate("/dashboard/broker/")).render
    assert (await portal.navigate("/dashboard/lender")).redirect_to == "/dashboard/broker"
    assert (await portal.navigate("/onboarding")).render
    assert len(fake.rows("profiles", id=result.identity.id)) == 1
    assert len(fake.rows("brokers", id=result.identity.id)) == 1


@pytest.mark.asyncio
async def test_onboarding_redirects_once_complete(portal):
    await portal.start()
    await portal.sign_up("l@example.com", "secret123", {"full_name": "L", "role": "lender", "country": "US"})

    await portal.lender.complete_onboarding({"company_name": "Acme", "specialization": "Bridging"})

    assert (await portal.navigate("/onboarding")).redirect_to == "/dashboard/lender"


@pytest.mark.asyncio
async def test_routing_before_and_after_session_restore(portal):
    """Protected pages wait while loading, then send anonymous users to /login."""
    waiting = await portal.navigate("/dashboard/admin")
    assert waiting.state == GateState.LOADING
    assert waiting.show_spinner

    await portal.start()

    assert (await portal.navigate("/dashboard/admin")).redirect_to == "/login"
    assert (await portal.navigate("/about")).render


@pytest.mark.asyncio
async def test_profile_completion_is_protected(fake, portal):
    """Signed-out visitors go to /login; admins are sent on to their dashboard."""
    await portal.start()
    assert (await portal.navigate("/profile-completion")).redirect_to == "/login"

    await portal.sign_up("p@example.com", "secret123", {"full_name": "P", "role": "broker", "country": "US"})
    assert (await portal.navigate("/profile-completion/")).render
    await portal.sign_out()

    fake.add_user("admin@example.com", "pw-123456", {"role": "admin", "full_name": "Ada", "country": "US"})
    await portal.sign_in("admin@example.com", "pw-123456")
    assert (await portal.navigate("/profile-completion")).redirect_to == "/dashboard"


@pytest.mark.asyncio
async def test_restored_session_runs_bootstrap(fake, portal):
    user = fake.add_user("r@example.com", metadata={"role": "lender", "full_name": "R", "country": "US"})
    await portal.start(Session.model_validate(fake.session_for(user["id"])))

    assert portal.session.profile.role == "lender"
    assert (await portal.navigate("/dashboard")).redirect_to == "/dashboard/lender"


@pytest.mark.asyncio
async def test_sign_out_returns_home_and_locks_dashboards(portal):
    await portal.start()
    await portal.sign_up("o@example.com", "secret123", {"full_name": "O", "role": "lender", "country": "US"})

    assert await portal.sign_out() == "/"
    assert portal.bootstrap_result is None
    assert (await portal.navigate("/dashboard/lender")).redirect_to == "/login"


# ---------------------------------------------------------------------------
# Profile banner
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_missing_profile_banner_and_retry(fake, portal, sleeper):
    """While the profile cannot be read the banner offers a retry."""
    await portal.start()
    fake.fail("GET", "/rest/v1/profiles", status=503)
    await portal.sign_up("m@example.com", "secret123", {"full_name": "M", "role": "broker", "country": "US"})

    banner = portal.profile_status()
    assert banner.status == ProfileStatus.MISSING
    assert banner.title == "Profile Incomplete"
    assert banner.can_retry
    assert (await portal.navigate("/dashboard/broker")).redirect_to == "/onboarding"

    fake.clear_failures()
    result = await portal.retry_profile()

    assert result.status == BootstrapStatus.READY
    assert portal.profile_status().status == ProfileStatus.OK


@pytest.mark.asyncio
async def test_setup_required_banner_lists_missing_fields(fake, portal):
    fake.add_user("n@example.com", "secret123", {"full_name": "N", "role": "lender"})
    await portal.start()
    await portal.sign_in("n@example.com", "secret123")

    banner = portal.profile_status()

    assert banner.status == ProfileStatus.SETUP_REQUIRED
    assert banner.title == "Profile Setup Required"
    assert banner.missing_fields == ["country"]


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected_locally(fake, portal):
    await portal.sign_up("b@example.com", "secret123", {"full_name": "B", "role": "broker", "country": "US"})
    fake.calls.clear()

    with pytest.raises(FileValidationError):
        await portal.broker.upload_file(
            FileUpload(file_name="big.pdf", content_type="application/pdf", data=b"0" * (15 * 1024 * 1024))
        )

    assert fake.calls == []


# ---------------------------------------------------------------------------
# Admin proxy
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_deletes_user_through_proxy(fake, portal):
    """The portal calls the proxy with the admin's token; the profile is gone afterwards."""
    target = fake.add_user("t@example.com", metadata={"role": "lender"})
    fake.add_row("profiles", {"id": target["id"], "full_name": "Target", "role": "lender", "country": "US"})
    fake.add_row("lenders", {"id": target["id"]})
    fake.add_user("admin@example.com", "pw-123456", {"role": "admin", "full_name": "Ada", "country": "US"})
    await portal.sign_in("admin@example.com", "pw-123456")
    await portal.admin.load()

    await portal.admin.delete_user(target["id"])

    assert fake.rows("profiles", id=target["id"]) == []
    assert fake.rows("lenders") == []
    assert target["id"] not in fake.users
    assert portal.admin.directory.get(target["id"]) is None


@pytest.mark.asyncio
async def test_admin_role_change_updates_identity_metadata(fake, portal):
    target = fake.add_user("t@example.com", metadata={"role": "lender"})
    fake.add_row("profiles", {"id": target["id"], "full_name": "Target", "role": "lender", "country": "US"})
    fake.add_user("admin@example.com", "pw-123456", {"role": "admin", "full_name": "Ada", "country": "US"})
    await portal.sign_in("admin@example.com", "pw-123456")

    result = await portal.admin.change_role(target["id"], "broker")

    assert result.ok
    assert fake.users[target["id"]]["user_metadata"]["role"] == "broker"


@pytest.mark.asyncio
async def test_proxy_rejects_non_admin_token(fake, portal):
    """A lender calling the proxy directly gets a 403 surfaced as AdminProxyError."""
    await portal.sign_up("x@example.com", "secret123", {"full_name": "X", "role": "lender", "country": "US"})

    with pytest.raises(AdminProxyError) as exc_info:
        await portal.proxy.delete_user("someone")

    assert exc_info.value.status == 403
    assert exc_info.value.message == "Insufficient permissions"
