# This project was developed with assistance from AI tools.
"""GoTrue (Supabase Auth) endpoints.

Methods return the decoded JSON bodies; session handling and error-to-value
conversion belong to the session store.
"""

import base64
import hashlib
import secrets
from typing import TYPE_CHECKING
from urllib.parse import urlencode

if TYPE_CHECKING:
    from .client import SupabaseClient

_AUTH = "/auth/v1"


def generate_pkce_pair() -> tuple[str, str]:
    """Return (code_verifier, code_challenge) for an S256 PKCE flow."""
    verifier = secrets.token_urlsafe(48)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


class AuthAPI:
    def __init__(self, client: "SupabaseClient"):
        self._client = client

    async def sign_up(self, email: str, password: str, data: dict | None = None) -> dict:
        """Create an identity. ``data`` becomes ``user_metadata``."""
        response = await self._client.request(
            "POST",
            f"{_AUTH}/signup",
            json={"email": email, "password": password, "data": data or {}},
        )
        return response.json()

    async def sign_in_with_password(self, email: str, password: str) -> dict:
        response = await self._client.request(
            "POST",
            f"{_AUTH}/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return response.json()

    async def refresh_session(self, refresh_token: str) -> dict:
        response = await self._client.request(
            "POST",
            f"{_AUTH}/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return response.json()

    async def exchange_code(self, auth_code: str, code_verifier: str) -> dict:
        """Complete a PKCE OAuth flow."""
        response = await self._client.request(
            "POST",
            f"{_AUTH}/token",
            params={"grant_type": "pkce"},
            json={"auth_code": auth_code, "code_verifier": code_verifier},
        )
        return response.json()

    async def get_user(self, access_token: str) -> dict:
        response = await self._client.request("GET", f"{_AUTH}/user", bearer=access_token)
        return response.json()

    async def sign_out(self, access_token: str, scope: str = "global") -> None:
        await self._client.request(
            "POST",
            f"{_AUTH}/logout",
            params={"scope": scope},
            bearer=access_token,
        )

    async def resend(self, email: str, type: str = "signup", redirect_to: str | None = None) -> None:
        """Resend a confirmation email."""
        body: dict = {"type": type, "email": email}
        if redirect_to:
            body["options"] = {"email_redirect_to": redirect_to}
        await self._client.request("POST", f"{_AUTH}/resend", json=body)

    def authorize_url(self, provider: str, redirect_to: str, code_challenge: str) -> str:
        query = urlencode(
            {
                "provider": provider,
                "redirect_to": redirect_to,
                "code_challenge": code_challenge,
                "code_challenge_method": "s256",
            }
        )
        return f"{self._client.url}{_AUTH}/authorize?{query}"

    # -- Admin (service-role key only) --

    async def admin_delete_user(self, user_id: str) -> None:
        await self._client.request("DELETE", f"{_AUTH}/admin/users/{user_id}")

    async def admin_update_user(self, user_id: str, attributes: dict) -> dict:
        response = await self._client.request(
            "PUT", f"{_AUTH}/admin/users/{user_id}", json=attributes
        )
        return response.json()
