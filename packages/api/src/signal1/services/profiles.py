# This project was developed with assistance from AI tools.
"""Profile repository: reads and writes ``profiles`` and the role tables.

Role-specific storage is dispatched through ``ROLE_TABLES``; admin has no
role table. Provider failures propagate as ``SupabaseError``.
"""

import logging

from db.enums import UserRole
from pydantic import BaseModel

from ..schemas.auth import Identity
from ..schemas.profile import BrokerProfile, LenderProfile, Profile, ProfileUpdate, RoleProfile
from ..supabase import SupabaseClient

logger = logging.getLogger(__name__)

ROLE_TABLES: dict[UserRole, str | None] = {
    UserRole.LENDER: "lenders",
    UserRole.BROKER: "brokers",
    UserRole.ADMIN: None,
}

ROLE_MODELS: dict[UserRole, type[LenderProfile] | type[BrokerProfile] | None] = {
    UserRole.LENDER: LenderProfile,
    UserRole.BROKER: BrokerProfile,
    UserRole.ADMIN: None,
}

REQUIRED_ONBOARDING_FIELDS: dict[UserRole, tuple[str, ...]] = {
    UserRole.LENDER: ("company_name", "specialization"),
    UserRole.BROKER: ("agency_name",),
    UserRole.ADMIN: (),
}


class ProfileValidationError(Exception):
    """Submitted profile data is incomplete or invalid. Nothing was written."""


def _values(data: BaseModel | dict) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_none=True, mode="json")
    return {k: v for k, v in data.items() if v is not None}


def is_role_profile_complete(role: UserRole, role_profile: RoleProfile | None) -> bool:
    """Admins are always complete; others need the flag or every required field."""
    if role == UserRole.ADMIN:
        return True
    if role_profile is None:
        return False
    if role_profile.profile_completed:
        return True
    return all(
        (getattr(role_profile, name, None) or "").strip()
        for name in REQUIRED_ONBOARDING_FIELDS[role]
    )


class ProfileRepository:
    def __init__(self, client: SupabaseClient):
        self._client = client

    # -- profiles --

    async def get_profile(self, user_id: str) -> Profile | None:
        row = await self._client.table("profiles").select_one({"id": user_id})
        return Profile.model_validate(row) if row else None

    async def create_profile(self, identity: Identity, role: UserRole) -> Profile:
        meta = identity.user_metadata
        rows = await self._client.table("profiles").insert(
            {
                "id": identity.id,
                "full_name": meta.get("full_name") or "",
                "role": role.value,
                "country": meta.get("country") or "",
                "email": identity.email,
            }
        )
        logger.info("Created profile for %s with role %s", identity.id, role.value)
        return Profile.model_validate(rows[0])

    async def update_profile(self, user_id: str, update: ProfileUpdate | dict) -> Profile | None:
        rows = await self._client.table("profiles").update(_values(update), filters={"id": user_id})
        return Profile.model_validate(rows[0]) if rows else None

    async def set_role(self, user_id: str, role: UserRole) -> Profile | None:
        rows = await self._client.table("profiles").update(
            {"role": role.value}, filters={"id": user_id}
        )
        return Profile.model_validate(rows[0]) if rows else None

    async def list_profiles(self) -> list[Profile]:
        rows = await self._client.table("profiles").select(order="created_at", desc=True)
        return [Profile.model_validate(r) for r in rows]

    # -- role tables --

    async def get_role_profile(self, user_id: str, role: UserRole) -> RoleProfile | None:
        table, model = ROLE_TABLES[role], ROLE_MODELS[role]
        if table is None:
            return None
        row = await self._client.table(table).select_one({"id": user_id})
        return model.model_validate(row) if row else None

    async def list_role_profiles(self, role: UserRole) -> list[RoleProfile]:
        table, model = ROLE_TABLES[role], ROLE_MODELS[role]
        if table is None:
            return []
        rows = await self._client.table(table).select()
        return [model.model_validate(r) for r in rows]

    async def ensure_role_profile(self, user_id: str, role: UserRole) -> RoleProfile | None:
        """Insert a minimal, not-yet-completed role row if none exists."""
        table, model = ROLE_TABLES[role], ROLE_MODELS[role]
        if table is None:
            return None
        existing = await self.get_role_profile(user_id, role)
        if existing is not None:
            return existing
        rows = await self._client.table(table).insert({"id": user_id, "profile_completed": False})
        logger.info("Created %s row for %s", table, user_id)
        return model.model_validate(rows[0])

    async def update_role_profile(
        self, user_id: str, role: UserRole, values: BaseModel | dict
    ) -> RoleProfile | None:
        table, model = ROLE_TABLES[role], ROLE_MODELS[role]
        if table is None:
            return None
        rows = await self._client.table(table).update(_values(values), filters={"id": user_id})
        return model.model_validate(rows[0]) if rows else None

    async def upsert_role_profile(
        self, user_id: str, role: UserRole, values: BaseModel | dict
    ) -> RoleProfile | None:
        table, model = ROLE_TABLES[role], ROLE_MODELS[role]
        if table is None:
            return None
        rows = await self._client.table(table).upsert({**_values(values), "id": user_id})
        return model.model_validate(rows[0])

    async def complete_onboarding(
        self, user_id: str, role: UserRole, submission: BaseModel | dict
    ) -> RoleProfile | None:
        """Validate required fields, then save them and mark the role profile complete."""
        values = _values(submission)
        missing = [
            name
            for name in REQUIRED_ONBOARDING_FIELDS[role]
            if not str(values.get(name) or "").strip()
        ]
        if missing:
            raise ProfileValidationError(f"Missing required fields: {', '.join(missing)}")
        return await self.upsert_role_profile(
            user_id, role, {**values, "profile_completed": True}
        )

    async def count_role_profiles(self, role: UserRole) -> int:
        table = ROLE_TABLES[role]
        if table is None:
            return await self._client.table("profiles").count(filters={"role": role})
        return await self._client.table(table).count()
