# This project was developed with assistance from AI tools.
"""Access gate: pure routing decisions for protected views.

Decisions depend only on (loading, identity present, profile present,
profile role vs. required role). A user on the wrong dashboard is sent to
their own dashboard, never to a forbidden page.
"""

from db.enums import UserRole

from ..core.auth import DASHBOARD_PATH, LOGIN_PATH, ONBOARDING_PATH, dashboard_path_for
from ..schemas.access import GateDecision, GateState
from ..schemas.auth import Identity
from ..schemas.profile import Profile, RoleProfile
from .profiles import is_role_profile_complete


class PermissionDenied(Exception):
    """Raised when the acting user may not perform a service-level operation."""


def _preflight(loading: bool, identity: Identity | None, profile: Profile | None) -> GateDecision | None:
    if loading:
        return GateDecision(state=GateState.LOADING)
    if identity is None:
        return GateDecision(state=GateState.UNAUTHENTICATED, redirect_to=LOGIN_PATH)
    if profile is None:
        return GateDecision(state=GateState.NO_PROFILE, redirect_to=ONBOARDING_PATH)
    return None


def resolve_access(
    *,
    loading: bool,
    identity: Identity | None,
    profile: Profile | None,
    required_role: UserRole | None = None,
) -> GateDecision:
    """Gate a route that needs a signed-in user, optionally with a given role."""
    decision = _preflight(loading, identity, profile)
    if decision is not None:
        return decision
    if required_role is not None and profile.user_role != required_role:
        return GateDecision(state=GateState.WRONG_ROLE, redirect_to=dashboard_path_for(profile.role))
    return GateDecision(state=GateState.AUTHORIZED)


def resolve_dashboard(
    *,
    loading: bool,
    identity: Identity | None,
    profile: Profile | None,
) -> GateDecision:
    """``/dashboard``: forward to the dashboard for the user's role."""
    decision = _preflight(loading, identity, profile)
    if decision is not None:
        return decision
    return GateDecision(state=GateState.AUTHORIZED, redirect_to=dashboard_path_for(profile.role))


def resolve_onboarding(
    *,
    loading: bool,
    identity: Identity | None,
    profile: Profile | None,
    role_profile: RoleProfile | None = None,
) -> GateDecision:
    """``/onboarding``: render the form unless there is nothing left to fill in."""
    if loading:
        return GateDecision(state=GateState.LOADING)
    if identity is None:
        return GateDecision(state=GateState.UNAUTHENTICATED, redirect_to=LOGIN_PATH)
    if profile is None:
        return GateDecision(state=GateState.NO_PROFILE)

    role = profile.user_role
    if role is None:
        return GateDecision(state=GateState.AUTHORIZED)
    if is_role_profile_complete(role, role_profile):
        return GateDecision(state=GateState.AUTHORIZED, redirect_to=dashboard_path_for(role))
    return GateDecision(state=GateState.AUTHORIZED)


def resolve_profile_completion(
    *,
    loading: bool,
    identity: Identity | None,
    profile: Profile | None,
) -> GateDecision:
    """``/profile-completion``: lenders and brokers only; anyone without a profile signs in again."""
    if loading:
        return GateDecision(state=GateState.LOADING)
    if identity is None:
        return GateDecision(state=GateState.UNAUTHENTICATED, redirect_to=LOGIN_PATH)
    if profile is None:
        return GateDecision(state=GateState.NO_PROFILE, redirect_to=LOGIN_PATH)
    if profile.user_role in (UserRole.LENDER, UserRole.BROKER):
        return GateDecision(state=GateState.AUTHORIZED)
    return GateDecision(state=GateState.WRONG_ROLE, redirect_to=DASHBOARD_PATH)
