# This project was developed with assistance from AI tools.
"""Profile bootstrap: make sure a signed-in identity has its backing rows.

Runs after every sign-in:

1. fetch the profile;
2. if absent, insert one from identity metadata (falling back to the
   configured default role);
3. re-fetch and, for lender/broker, insert a not-yet-completed role row;
4. fetch the profile again with a fixed-delay retry loop, since the row may
   be written asynchronously (by the sign-up trigger or a concurrent tab).

Failures in steps 1-3 are logged and collected; only step 4 decides the
outcome, which is READY or the terminal UNAVAILABLE state.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from db.enums import UserRole

from ..core.auth import parse_role
from ..core.config import Settings
from ..schemas.access import BootstrapResult, BootstrapStatus
from ..schemas.auth import Identity
from ..schemas.profile import Profile
from ..supabase import SupabaseError
from .profiles import ProfileRepository

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class ProfileBootstrapper:
    def __init__(
        self,
        profiles: ProfileRepository,
        *,
        default_role: UserRole | None = UserRole.LENDER,
        max_attempts: int = 5,
        retry_delay: float = 0.2,
        sleep: Sleep = asyncio.sleep,
    ):
        self._profiles = profiles
        self._default_role = default_role
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, profiles: ProfileRepository, cfg: Settings, *, sleep: Sleep = asyncio.sleep
    ) -> "ProfileBootstrapper":
        default_role = parse_role(cfg.DEFAULT_PROFILE_ROLE)
        if cfg.DEFAULT_PROFILE_ROLE and default_role is None:
            raise ValueError(f"DEFAULT_PROFILE_ROLE '{cfg.DEFAULT_PROFILE_ROLE}' is not a known role")
        return cls(
            profiles,
            default_role=default_role,
            max_attempts=cfg.BOOTSTRAP_MAX_ATTEMPTS,
            retry_delay=cfg.BOOTSTRAP_RETRY_DELAY_MS / 1000,
            sleep=sleep,
        )

    async def run(self, identity: Identity) -> BootstrapResult:
        errors: list[str] = []

        profile = await self._try_fetch(identity.id, errors)

        if profile is None:
            role = identity.metadata_role or self._default_role
            if role is None:
                logger.warning(
                    "Identity %s has no valid role in metadata and no default is configured",
                    identity.id,
                )
            else:
                try:
                    await self._profiles.create_profile(identity, role)
                except SupabaseError as exc:
                    # A concurrent insert (trigger or another tab) lands here too.
                    logger.warning("Profile insert for %s failed: %s", identity.id, exc.message)
                    errors.append(f"create_profile: {exc.message}")
            profile = await self._try_fetch(identity.id, errors)

        role = profile.user_role if profile else None
        if role is not None:
            try:
                await self._profiles.ensure_role_profile(identity.id, role)
            except SupabaseError as exc:
                logger.warning(
                    "Role profile insert for %s (%s) failed: %s", identity.id, role.value, exc.message
                )
                errors.append(f"ensure_role_profile: {exc.message}")
        elif profile is not None:
            logger.warning("Profile %s has unrecognised role %r", identity.id, profile.role)

        return await self.fetch_with_retry(identity.id, errors=errors)

    async def refresh(self, identity: Identity) -> BootstrapResult:
        """Re-run only the final fetch (the banner's retry action)."""
        return await self.fetch_with_retry(identity.id)

    async def fetch_with_retry(
        self, user_id: str, *, errors: list[str] | None = None
    ) -> BootstrapResult:
        errors = errors if errors is not None else []
        for attempt in range(1, self._max_attempts + 1):
            await self._sleep(self._retry_delay)
            profile = await self._try_fetch(user_id, errors)
            if profile is not None:
                return BootstrapResult(
                    status=BootstrapStatus.READY, profile=profile, attempts=attempt, errors=errors
                )
            logger.debug("Profile %s not available (attempt %d/%d)", user_id, attempt, self._max_attempts)

        logger.error("Profile %s unavailable after %d attempts", user_id, self._max_attempts)
        return BootstrapResult(
            status=BootstrapStatus.UNAVAILABLE, attempts=self._max_attempts, errors=errors
        )

    async def _try_fetch(self, user_id: str, errors: list[str]) -> Profile | None:
        try:
            return await self._profiles.get_profile(user_id)
        except SupabaseError as exc:
            logger.warning("Profile fetch for %s failed: %s", user_id, exc.message)
            errors.append(f"get_profile: {exc.message}")
            return None
