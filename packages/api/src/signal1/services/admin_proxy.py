# This project was developed with assistance from AI tools.
"""Client for the privileged admin proxy.

The portal never holds the service-role key; deleting identities and
changing identity metadata go through the proxy, authenticated with the
signed-in admin's access token.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from ..core.config import Settings

logger = logging.getLogger(__name__)


class AdminProxyError(Exception):
    """The proxy rejected a request or could not be reached."""

    def __init__(self, message: str, *, status: int = 0, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


class AdminProxyClient:
    def __init__(
        self,
        base_url: str,
        *,
        token_provider: Callable[[], str | None],
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    @classmethod
    def from_settings(
        cls,
        cfg: Settings,
        *,
        token_provider: Callable[[], str | None],
        http_client: httpx.AsyncClient | None = None,
    ) -> "AdminProxyClient":
        return cls(
            cfg.ADMIN_PROXY_URL,
            token_provider=token_provider,
            http_client=http_client,
            timeout=cfg.SUPABASE_TIMEOUT,
        )

    async def _post(self, path: str, body: dict) -> dict:
        headers = {}
        token = self._token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._http.post(f"{self._base_url}{path}", json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Admin proxy %s unreachable: %s", path, exc)
            raise AdminProxyError(f"Admin proxy unreachable: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.is_error:
            message = payload.get("error") or payload.get("detail") or response.reason_phrase
            raise AdminProxyError(
                str(message), status=response.status_code, details=payload.get("details")
            )
        return payload

    async def delete_user(self, user_id: str) -> None:
        await self._post("/admin/delete-user", {"userId": user_id})

    async def set_user_role(self, user_id: str, role: str) -> dict:
        payload = await self._post("/admin/set-user-role", {"userId": user_id, "role": role})
        return payload.get("data") or {}

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()
