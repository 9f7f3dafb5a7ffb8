# This project was developed with assistance from AI tools.
"""Dashboard view models."""

from pydantic import BaseModel, Field

from .admin import DashboardStats, DirectoryEntry
from .file import StoredFile
from .note import AdminNote
from .profile import BrokerProfile, LenderProfile, Profile


class RoleDashboardView(BaseModel):
    """What a lender or broker sees on their own dashboard."""

    profile: Profile
    role_profile: LenderProfile | BrokerProfile | None = None
    profile_complete: bool = False
    files: list[StoredFile] = Field(default_factory=list)
    unread_notes: list[AdminNote] = Field(default_factory=list)


class AdminDashboardView(BaseModel):
    stats: DashboardStats
    users: list[DirectoryEntry] = Field(default_factory=list)
