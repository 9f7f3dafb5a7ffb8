# This project was developed with assistance from AI tools.
"""Admin notes: short messages admins attach to a user."""

import logging

from db.enums import UserRole

from ..schemas.note import AdminNote
from ..supabase import SupabaseClient
from .access import PermissionDenied

logger = logging.getLogger(__name__)

_TABLE = "admin_notes"


class NoteValidationError(Exception):
    """Raised when a note is empty; nothing is written."""


def _require_admin(actor_role: UserRole | None) -> None:
    if actor_role != UserRole.ADMIN:
        raise PermissionDenied("Only admins can manage notes")


def _clean(text: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise NoteValidationError("Note cannot be empty")
    return cleaned


class AdminNotesService:
    def __init__(self, client: SupabaseClient):
        self._client = client

    async def list_for_user(self, user_id: str, *, created_by: str | None = None) -> list[AdminNote]:
        filters = {"user_id": user_id}
        if created_by is not None:
            filters["created_by"] = created_by
        rows = await self._client.table(_TABLE).select(filters=filters, order="created_at", desc=True)
        return [AdminNote.model_validate(r) for r in rows]

    async def unread_for_user(self, user_id: str) -> list[AdminNote]:
        rows = await self._client.table(_TABLE).select(
            filters={"user_id": user_id, "read": False}, order="created_at", desc=True
        )
        return [AdminNote.model_validate(r) for r in rows]

    async def create(
        self, *, actor_id: str, actor_role: UserRole | None, user_id: str, text: str
    ) -> AdminNote:
        _require_admin(actor_role)
        note = _clean(text)
        rows = await self._client.table(_TABLE).insert(
            {"user_id": user_id, "created_by": actor_id, "note": note, "read": False}
        )
        logger.info("Admin %s added a note for %s", actor_id, user_id)
        return AdminNote.model_validate(rows[0])

    async def edit(self, *, actor_role: UserRole | None, note_id: str, text: str) -> AdminNote | None:
        _require_admin(actor_role)
        note = _clean(text)
        rows = await self._client.table(_TABLE).update({"note": note}, filters={"id": note_id})
        return AdminNote.model_validate(rows[0]) if rows else None

    async def delete(self, *, actor_role: UserRole | None, note_id: str) -> None:
        _require_admin(actor_role)
        await self._client.table(_TABLE).delete(filters={"id": note_id})

    async def mark_read(
        self, *, actor_id: str, actor_role: UserRole | None, note_id: str
    ) -> AdminNote | None:
        """Mark a note read. Non-admins can only touch notes addressed to them."""
        filters = {"id": note_id}
        if actor_role != UserRole.ADMIN:
            filters["user_id"] = actor_id
        rows = await self._client.table(_TABLE).update({"read": True}, filters=filters)
        if not rows:
            logger.warning("Note %s not found for %s", note_id, actor_id)
            return None
        return AdminNote.model_validate(rows[0])
