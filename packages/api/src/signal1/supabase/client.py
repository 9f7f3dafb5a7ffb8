# This project was developed with assistance from AI tools.
"""Async Supabase client over httpx.

One ``SupabaseClient`` talks to the three Supabase services the portal
uses -- GoTrue (``/auth/v1``), PostgREST (``/rest/v1``) and Storage
(``/storage/v1``). Every non-2xx response and every transport failure is
raised as ``SupabaseError``; callers decide whether that is fatal.

The client authenticates as whoever holds the current access token, or as
the bare API key (anon or service role) when no user is signed in.
"""

import logging
from typing import Any

import httpx

from ..core.config import Settings
from .auth import AuthAPI
from .errors import SupabaseError
from .storage import StorageAPI

logger = logging.getLogger(__name__)


def _encode_filter(value: Any) -> str:
    """Render a PostgREST equality filter value."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    if hasattr(value, "value"):
        value = value.value
    return f"eq.{value}"


class TableQuery:
    """PostgREST operations on a single table, filtered by column equality."""

    def __init__(self, client: "SupabaseClient", table: str):
        self._client = client
        self._table = table

    @property
    def path(self) -> str:
        return f"/rest/v1/{self._table}"

    @staticmethod
    def _params(filters: dict[str, Any] | None, **extra: str) -> dict[str, str]:
        params = {col: _encode_filter(val) for col, val in (filters or {}).items()}
        params.update({k: v for k, v in extra.items() if v is not None})
        return params

    async def select(
        self,
        columns: str = "*",
        *,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        order_param = f"{order}.{'desc' if desc else 'asc'}" if order else None
        params = self._params(
            filters,
            select=columns,
            order=order_param,
            limit=str(limit) if limit is not None else None,
        )
        response = await self._client.request("GET", self.path, params=params)
        return response.json()

    async def select_one(self, filters: dict[str, Any], columns: str = "*") -> dict | None:
        """Return the single matching row, or None when nothing matches."""
        rows = await self.select(columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, rows: dict | list[dict]) -> list[dict]:
        response = await self._client.request(
            "POST",
            self.path,
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def upsert(self, rows: dict | list[dict], *, on_conflict: str = "id") -> list[dict]:
        response = await self._client.request(
            "POST",
            self.path,
            params={"on_conflict": on_conflict},
            json=rows,
            headers={"Prefer": "return=representation,resolution=merge-duplicates"},
        )
        return response.json()

    async def update(self, values: dict, *, filters: dict[str, Any]) -> list[dict]:
        if not filters:
            raise ValueError("update() requires at least one filter")
        response = await self._client.request(
            "PATCH",
            self.path,
            params=self._params(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def delete(self, *, filters: dict[str, Any]) -> list[dict]:
        if not filters:
            raise ValueError("delete() requires at least one filter")
        response = await self._client.request(
            "DELETE",
            self.path,
            params=self._params(filters),
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def count(self, *, filters: dict[str, Any] | None = None) -> int:
        """Exact row count read from the ``Content-Range`` header."""
        response = await self._client.request(
            "HEAD",
            self.path,
            params=self._params(filters, select="*"),
            headers={"Prefer": "count=exact"},
        )
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        if not total or total == "*":
            raise SupabaseError(
                f"Missing count for {self._table}",
                status=response.status_code,
                details=content_range,
            )
        return int(total)


class SupabaseClient:
    """Entry point for Auth, table and Storage calls against one project."""

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        access_token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.url = url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self.auth = AuthAPI(self)
        self.storage = StorageAPI(self)

    @classmethod
    def from_settings(
        cls,
        cfg: Settings,
        *,
        service_role: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ) -> "SupabaseClient":
        """Build an anon client, or a service-role client when ``service_role`` is set."""
        if service_role:
            if not cfg.SUPABASE_SERVICE_ROLE_KEY:
                raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY is not configured")
            key = cfg.SUPABASE_SERVICE_ROLE_KEY
        else:
            key = cfg.SUPABASE_ANON_KEY
        return cls(cfg.SUPABASE_URL, key, http_client=http_client, timeout=cfg.SUPABASE_TIMEOUT)

    @property
    def access_token(self) -> str | None:
        return self._access_token

    def set_access_token(self, token: str | None) -> None:
        """Act as the given user from now on (None reverts to the API key)."""
        self._access_token = token

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    def headers(self, bearer: str | None = None) -> dict[str, str]:
        token = bearer or self._access_token or self._api_key
        return {"apikey": self._api_key, "Authorization": f"Bearer {token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        bearer: str | None = None,
    ) -> httpx.Response:
        """Send a request, raising ``SupabaseError`` for anything but a 2xx response."""
        merged = self.headers(bearer)
        if headers:
            merged.update(headers)
        try:
            response = await self._http.request(
                method,
                f"{self.url}{path}",
                params=params,
                json=json,
                content=content,
                headers=merged,
            )
        except httpx.HTTPError as exc:
            logger.warning("Supabase %s %s failed: %s", method, path, exc)
            raise SupabaseError(f"Network error: {exc}") from exc

        if response.is_error:
            error = SupabaseError.from_response(response)
            logger.debug(
                "Supabase %s %s -> %s %s", method, path, response.status_code, error.message
            )
            raise error
        return response

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()


def log_supabase_status(cfg: Settings) -> None:
    """Log which Supabase project and credentials are configured (never the keys)."""
    logger.info(
        "Supabase: url=%s anon_key=%s service_role_key=%s jwt_verification=%s",
        cfg.SUPABASE_URL,
        "set" if cfg.SUPABASE_ANON_KEY else "MISSING",
        "set" if cfg.SUPABASE_SERVICE_ROLE_KEY else "MISSING",
        "hs256-secret" if cfg.SUPABASE_JWT_SECRET else "jwks",
    )
