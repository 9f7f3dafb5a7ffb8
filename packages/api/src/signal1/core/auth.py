# This project was developed with assistance from AI tools.
"""Pure role utility functions with no FastAPI or HTTP dependencies.

Used by the access gate, the session store and the admin proxy alike, so
role parsing and the role -> dashboard table live in one place.
"""

from db.enums import UserRole

LOGIN_PATH = "/login"
ONBOARDING_PATH = "/onboarding"
PROFILE_COMPLETION_PATH = "/profile-completion"
DASHBOARD_PATH = "/dashboard"
HOME_PATH = "/"

DASHBOARD_PATHS: dict[UserRole, str] = {
    UserRole.LENDER: "/dashboard/lender",
    UserRole.BROKER: "/dashboard/broker",
    UserRole.ADMIN: "/dashboard/admin",
}


def parse_role(value: object) -> UserRole | None:
    """Return the UserRole for a stored value, or None if it is not in the allow-list."""
    if isinstance(value, UserRole):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UserRole(value.strip().lower())
    except ValueError:
        return None


def dashboard_path_for(role: object) -> str:
    """Dashboard route for a role; unknown roles are sent to onboarding."""
    parsed = parse_role(role)
    if parsed is None:
        return ONBOARDING_PATH
    return DASHBOARD_PATHS[parsed]
