# This project was developed with assistance from AI tools.
"""Liveness endpoint."""

from fastapi import APIRouter

from ..core.config import settings

router = APIRouter()


@router.get("/")
async def health() -> dict[str, str]:
    """Report that the proxy is up and which Supabase project it targets."""
    return {"status": "ok", "supabase_url": settings.SUPABASE_URL}
