# This project was developed with assistance from AI tools.
"""Admin proxy wire schemas and admin dashboard view models."""

from typing import Any

from pydantic import BaseModel, Field

from .profile import BrokerProfile, LenderProfile, Profile

# ---------------------------------------------------------------------------
# Admin proxy (camelCase keys on the wire)
# ---------------------------------------------------------------------------


class DeleteUserRequest(BaseModel):
    # Optional so a missing id yields the endpoint's own 400 body, not a 422.
    userId: str | None = None


class SetUserRoleRequest(BaseModel):
    userId: str | None = None
    role: str | None = None


class DeleteUserResponse(BaseModel):
    success: bool = True


class SetUserRoleResponse(BaseModel):
    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Admin dashboard
# ---------------------------------------------------------------------------


class DashboardStats(BaseModel):
    total_lenders: int = 0
    total_brokers: int = 0
    total_files: int = 0


class DirectoryEntry(BaseModel):
    """A profile joined with its role-specific row (if any)."""

    profile: Profile
    lender: LenderProfile | None = None
    broker: BrokerProfile | None = None


class UserDetailUpdate(BaseModel):
    """Fields an admin can edit on a user in one pass."""

    full_name: str | None = None
    country: str | None = None
    role: str | None = None
    role_data: dict[str, Any] = Field(default_factory=dict)


class RoleChangeResult(BaseModel):
    """Outcome of a multi-step, non-transactional role change."""

    completed_steps: list[str] = Field(default_factory=list)
    failed_steps: list[str] = Field(default_factory=list)
    last_error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.failed_steps
