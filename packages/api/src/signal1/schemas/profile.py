# This project was developed with assistance from AI tools.
"""Profile and role-profile schemas."""

from datetime import datetime

from db.enums import SubscriptionTier, UserRole
from pydantic import BaseModel

from ..core.auth import parse_role
from . import SupabaseRow


class Profile(SupabaseRow):
    """Row of ``profiles``.

    ``role`` keeps the stored string so that a value outside the allow-list
    can still be loaded and routed to onboarding.
    """

    id: str
    full_name: str | None = None
    role: str | None = None
    country: str | None = None
    email: str | None = None
    created_at: datetime | None = None

    @property
    def user_role(self) -> UserRole | None:
        return parse_role(self.role)

    def missing_fields(self) -> list[str]:
        """Basic fields still empty (full_name, role, country)."""
        return [
            name
            for name in ("full_name", "role", "country")
            if not (getattr(self, name) or "").strip()
        ]


class LenderProfile(SupabaseRow):
    id: str
    company_name: str | None = None
    specialization: str | None = None
    criteria_summary: str | None = None
    contact_info: str | None = None
    guideline_file_url: str | None = None
    profile_completed: bool = False
    created_at: datetime | None = None


class BrokerProfile(SupabaseRow):
    id: str
    agency_name: str | None = None
    client_notes: str | None = None
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    profile_completed: bool = False
    created_at: datetime | None = None


RoleProfile = LenderProfile | BrokerProfile


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    country: str | None = None
    email: str | None = None


class LenderProfileUpdate(BaseModel):
    company_name: str | None = None
    specialization: str | None = None
    criteria_summary: str | None = None
    contact_info: str | None = None


class BrokerProfileUpdate(BaseModel):
    agency_name: str | None = None
    client_notes: str | None = None
    subscription_tier: SubscriptionTier | None = None
