# This project was developed with assistance from AI tools.
"""Privileged identity operations, run by the admin proxy with the service-role key.

The module exposes a singleton initialised at app startup via
``init_user_admin_service()``.
"""

import logging

from db.enums import UserRole

from ..core.auth import parse_role
from ..core.config import Settings
from ..supabase import SupabaseClient

logger = logging.getLogger(__name__)


class InvalidRoleError(ValueError):
    """Raised when a role outside the allow-list is requested."""


class UserAdminService:
    def __init__(self, client: SupabaseClient):
        self._client = client

    @property
    def client(self) -> SupabaseClient:
        return self._client

    async def get_role(self, user_id: str) -> UserRole | None:
        """Role stored on the user's profile (None when absent or unknown)."""
        row = await self._client.table("profiles").select_one({"id": user_id}, columns="id,role")
        return parse_role(row.get("role")) if row else None

    async def delete_user(self, user_id: str) -> None:
        """Delete the profile row (cascading to role rows, files and notes), then the identity."""
        await self._client.table("profiles").delete(filters={"id": user_id})
        await self._client.auth.admin_delete_user(user_id)
        logger.info("Deleted user %s", user_id)

    async def set_user_role(self, user_id: str, role: str) -> dict:
        """Write ``role`` into the identity's user_metadata and return the updated user."""
        parsed = parse_role(role)
        if parsed is None:
            raise InvalidRoleError(f"Invalid role '{role}'")
        user = await self._client.auth.admin_update_user(
            user_id, {"user_metadata": {"role": parsed.value}}
        )
        logger.info("Set identity role for %s to %s", user_id, parsed.value)
        return user

    async def aclose(self) -> None:
        await self._client.aclose()


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_service: UserAdminService | None = None


def init_user_admin_service(cfg: Settings) -> UserAdminService:
    """Initialise the singleton (called once from app lifespan).

    Raises RuntimeError when the service-role key is missing.
    """
    global _service  # noqa: PLW0603
    _service = UserAdminService(SupabaseClient.from_settings(cfg, service_role=True))
    logger.info("UserAdminService initialised (supabase=%s)", cfg.SUPABASE_URL)
    return _service


def get_user_admin_service() -> UserAdminService:
    """Return the initialised UserAdminService singleton."""
    if _service is None:
        raise RuntimeError("UserAdminService not initialised -- call init_user_admin_service() first")
    return _service


async def shutdown_user_admin_service() -> None:
    global _service  # noqa: PLW0603
    if _service is not None:
        await _service.aclose()
        _service = None
