# This project was developed with assistance from AI tools.
"""Access gate and profile status schemas."""

import enum

from pydantic import BaseModel, Field

from .profile import Profile


class GateState(str, enum.Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    NO_PROFILE = "no_profile"
    WRONG_ROLE = "wrong_role"
    AUTHORIZED = "authorized"


class GateDecision(BaseModel):
    """What a protected route does: render, wait, or redirect."""

    state: GateState
    redirect_to: str | None = None

    @property
    def render(self) -> bool:
        return self.state != GateState.LOADING and self.redirect_to is None

    @property
    def show_spinner(self) -> bool:
        return self.state == GateState.LOADING


class BootstrapStatus(str, enum.Enum):
    READY = "ready"
    UNAVAILABLE = "unavailable"


class BootstrapResult(BaseModel):
    status: BootstrapStatus
    profile: Profile | None = None
    attempts: int = 0
    errors: list[str] = Field(default_factory=list)


class ProfileStatus(str, enum.Enum):
    OK = "ok"
    MISSING = "missing"
    SETUP_REQUIRED = "setup_required"


class ProfileBanner(BaseModel):
    """Persistent notice shown while the profile is absent or incomplete."""

    status: ProfileStatus
    title: str = ""
    message: str = ""
    can_retry: bool = False
    missing_fields: list[str] = Field(default_factory=list)
