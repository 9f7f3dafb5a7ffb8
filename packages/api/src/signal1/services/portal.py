# This project was developed with assistance from AI tools.
"""Portal: wires the session store, bootstrap, access gate and dashboards.

One ``Portal`` per signed-in client. It subscribes to the session store,
runs the profile bootstrap on every sign-in, and answers "what happens if
the user opens this path" through the access gate.
"""

import asyncio
import logging

import httpx
from db.enums import UserRole

from ..core.auth import DASHBOARD_PATH, DASHBOARD_PATHS, ONBOARDING_PATH, PROFILE_COMPLETION_PATH
from ..core.config import Settings, settings
from ..schemas.access import (
    BootstrapResult,
    BootstrapStatus,
    GateDecision,
    GateState,
    ProfileBanner,
    ProfileStatus,
)
from ..schemas.auth import AuthResult, Identity, Session
from ..supabase import SupabaseClient, SupabaseError
from .access import resolve_access, resolve_dashboard, resolve_onboarding, resolve_profile_completion
from .admin_proxy import AdminProxyClient
from .bootstrap import ProfileBootstrapper, Sleep
from .dashboards import AdminDashboard, BrokerDashboard, LenderDashboard
from .files import FileService
from .notes import AdminNotesService
from .profiles import ProfileRepository
from .session import AuthEvent, SessionManager

logger = logging.getLogger(__name__)

_ROLE_BY_DASHBOARD = {path: role for role, path in DASHBOARD_PATHS.items()}


class Portal:
    def __init__(
        self,
        client: SupabaseClient,
        *,
        cfg: Settings = settings,
        proxy: AdminProxyClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.session = SessionManager(client, site_url=cfg.SITE_URL)
        self.profiles = ProfileRepository(client)
        self.bootstrapper = ProfileBootstrapper.from_settings(self.profiles, cfg, sleep=sleep)
        self.files = FileService.from_settings(client, cfg)
        self.notes = AdminNotesService(client)
        self.proxy = proxy or AdminProxyClient.from_settings(
            cfg, token_provider=lambda: self.session.access_token
        )

        parts = (self.session, self.profiles, self.files, self.notes)
        self.lender = LenderDashboard(*parts)
        self.broker = BrokerDashboard(*parts)
        self.admin = AdminDashboard(*parts, proxy=self.proxy)

        self.bootstrap_result: BootstrapResult | None = None
        self._unsubscribe = self.session.subscribe(self._on_auth_change)

    @classmethod
    def from_settings(
        cls,
        cfg: Settings = settings,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> "Portal":
        client = SupabaseClient.from_settings(cfg, http_client=http_client)
        proxy = AdminProxyClient.from_settings(
            cfg, token_provider=lambda: client.access_token, http_client=http_client
        )
        return cls(client, cfg=cfg, proxy=proxy, sleep=sleep)

    # -- Lifecycle --

    async def start(self, session: Session | None = None) -> AuthResult:
        return await self.session.initialize(session)

    async def close(self) -> None:
        self._unsubscribe()
        self.session.dispose()
        await self.proxy.aclose()
        await self.client.aclose()

    async def _on_auth_change(self, event: AuthEvent, identity: Identity | None) -> None:
        if identity is None:
            self.bootstrap_result = None
            return
        if event in (AuthEvent.SIGNED_IN, AuthEvent.INITIAL_SESSION):
            self._apply(await self.bootstrapper.run(identity))

    def _apply(self, result: BootstrapResult) -> None:
        self.bootstrap_result = result
        self.session.set_profile(result.profile)
        if result.status == BootstrapStatus.UNAVAILABLE:
            logger.warning("Profile unavailable after bootstrap: %s", "; ".join(result.errors) or "not found")

    async def retry_profile(self) -> BootstrapResult | None:
        """Banner retry: fetch the profile again."""
        identity = self.session.identity
        if identity is None:
            return None
        result = await self.bootstrapper.refresh(identity)
        self._apply(result)
        return result

    # -- Auth shortcuts --

    async def sign_in(self, email: str, password: str) -> AuthResult:
        return await self.session.sign_in(email, password)

    async def sign_up(self, email: str, password: str, metadata: dict) -> AuthResult:
        return await self.session.sign_up(email, password, metadata)

    async def sign_out(self) -> str:
        return await self.session.sign_out()

    # -- Routing --

    async def navigate(self, path: str) -> GateDecision:
        """Gate decision for opening ``path`` in the current state."""
        path = path.rstrip("/") or "/"
        loading = self.session.loading
        identity = self.session.identity
        profile = self.session.profile

        if path == DASHBOARD_PATH:
            return resolve_dashboard(loading=loading, identity=identity, profile=profile)

        if path in _ROLE_BY_DASHBOARD:
            return resolve_access(
                loading=loading,
                identity=identity,
                profile=profile,
                required_role=_ROLE_BY_DASHBOARD[path],
            )

        if path == ONBOARDING_PATH:
            role_profile = None
            role = profile.user_role if profile else None
            if role is not None and role != UserRole.ADMIN and not loading:
                try:
                    role_profile = await self.profiles.get_role_profile(profile.id, role)
                except SupabaseError as exc:
                    logger.warning("Could not load role profile for onboarding: %s", exc.message)
            return resolve_onboarding(
                loading=loading, identity=identity, profile=profile, role_profile=role_profile
            )

        if path == PROFILE_COMPLETION_PATH:
            return resolve_profile_completion(loading=loading, identity=identity, profile=profile)

        return GateDecision(state=GateState.AUTHORIZED)

    def profile_status(self) -> ProfileBanner:
        """Banner shown while the signed-in user's profile is missing or incomplete."""
        if self.session.loading or self.session.identity is None:
            return ProfileBanner(status=ProfileStatus.OK)

        profile = self.session.profile
        if profile is None:
            return ProfileBanner(
                status=ProfileStatus.MISSING,
                title="Profile Incomplete",
                message="Your profile could not be loaded. Retry, or contact support if this persists.",
                can_retry=True,
            )

        missing = profile.missing_fields()
        if missing:
            return ProfileBanner(
                status=ProfileStatus.SETUP_REQUIRED,
                title="Profile Setup Required",
                message="Please complete your profile: " + ", ".join(missing),
                missing_fields=missing,
            )
        return ProfileBanner(status=ProfileStatus.OK)
