# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from datetime import datetime

from db.enums import UserRole
from pydantic import BaseModel, ConfigDict, Field

from ..core.auth import parse_role


class Identity(BaseModel):
    """Supabase Auth user, as returned by GoTrue."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    email_confirmed_at: datetime | None = None
    user_metadata: dict = Field(default_factory=dict)
    app_metadata: dict = Field(default_factory=dict)

    @property
    def email_confirmed(self) -> bool:
        return self.email_confirmed_at is not None

    @property
    def metadata_role(self) -> UserRole | None:
        return parse_role(self.user_metadata.get("role"))


class Session(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    expires_at: int | None = None
    user: Identity


class AuthError(BaseModel):
    """Auth failure returned as a value rather than raised."""

    message: str
    status: int = 0
    code: str | None = None


class AuthResult(BaseModel):
    """Outcome of a session store operation."""

    identity: Identity | None = None
    session: Session | None = None
    url: str | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SignUpMetadata(BaseModel):
    full_name: str = ""
    role: str
    country: str = ""


class TokenPayload(BaseModel):
    """Decoded Supabase access-token claims."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    email: str = ""
    role: str = ""
    aud: str | list[str] = ""
    user_metadata: dict = Field(default_factory=dict)
    app_metadata: dict = Field(default_factory=dict)


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    email: str
    name: str = ""
