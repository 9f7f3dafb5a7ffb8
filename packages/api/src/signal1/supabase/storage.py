# This project was developed with assistance from AI tools.
"""Supabase Storage endpoints."""

from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from .client import SupabaseClient

_STORAGE = "/storage/v1"


class StorageAPI:
    def __init__(self, client: "SupabaseClient"):
        self._client = client

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        *,
        upsert: bool = False,
    ) -> str:
        """Upload bytes and return the object path within the bucket."""
        await self._client.request(
            "POST",
            f"{_STORAGE}/object/{bucket}/{quote(path)}",
            content=data,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
            },
        )
        return path

    async def remove(self, bucket: str, paths: list[str]) -> list[dict]:
        response = await self._client.request(
            "DELETE",
            f"{_STORAGE}/object/{bucket}",
            json={"prefixes": paths},
        )
        return response.json()

    async def create_signed_url(self, bucket: str, path: str, expires_in: int = 3600) -> str:
        response = await self._client.request(
            "POST",
            f"{_STORAGE}/object/sign/{bucket}/{quote(path)}",
            json={"expiresIn": expires_in},
        )
        signed = response.json()["signedURL"]
        return f"{self._client.url}{_STORAGE}{signed}"
