# This project was developed with assistance from AI tools.
"""Session store: the single source of truth for who is signed in.

Owns the current identity, its tokens and the cached profile, and notifies
subscribers on every identity change. Provider failures (network, bad
credentials, duplicate account) come back as ``AuthResult.error`` values;
nothing here raises for them.

The store is created and torn down explicitly (``initialize`` /
``dispose``) by whoever owns it, usually ``Portal``.
"""

import enum
import logging
from collections.abc import Awaitable, Callable

from db.enums import UserRole

from ..core.auth import HOME_PATH, parse_role
from ..schemas.auth import AuthError, AuthResult, Identity, Session, SignUpMetadata
from ..schemas.profile import Profile
from ..supabase import SupabaseClient, SupabaseError
from ..supabase.auth import generate_pkce_pair

logger = logging.getLogger(__name__)

_ALLOWED_ROLES = ", ".join(r.value for r in UserRole)
MIN_PASSWORD_LENGTH = 6


class AuthEvent(str, enum.Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


Listener = Callable[[AuthEvent, Identity | None], Awaitable[None]]


def _error_result(exc: SupabaseError) -> AuthResult:
    return AuthResult(error=AuthError(message=exc.message, status=exc.status, code=exc.code))


def _registration_error(email: str, password: str, meta: dict) -> AuthError | None:
    missing = [name for name, value in (("email", email), *meta.items()) if not (value or "").strip()]
    if missing:
        return AuthError(message="Missing required fields: " + ", ".join(missing), code="missing_fields")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        return AuthError(
            message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            code="weak_password",
        )
    return None


class SessionManager:
    """Holds identity, session and cached profile for one signed-in user."""

    def __init__(self, client: SupabaseClient, *, site_url: str = ""):
        self._client = client
        self._site_url = site_url.rstrip("/")
        self._listeners: list[Listener] = []
        self._pkce_verifier: str | None = None
        self.identity: Identity | None = None
        self.session: Session | None = None
        self.profile: Profile | None = None
        self.loading = True

    # -- Lifecycle --

    async def initialize(self, session: Session | None = None) -> AuthResult:
        """Restore a persisted session (if any) and announce the initial identity.

        ``loading`` stays set until subscribers have handled the initial
        event, so nothing renders against a half-loaded profile.
        """
        try:
            if session is None:
                await self._emit(AuthEvent.INITIAL_SESSION)
                return AuthResult()

            try:
                user = await self._client.auth.get_user(session.access_token)
                restored = session.model_copy(update={"user": Identity.model_validate(user)})
            except SupabaseError as exc:
                logger.info("Stored access token rejected (%s), refreshing", exc.message)
                try:
                    body = await self._client.auth.refresh_session(session.refresh_token)
                except SupabaseError as refresh_exc:
                    logger.warning("Session restore failed: %s", refresh_exc.message)
                    self._clear()
                    await self._emit(AuthEvent.INITIAL_SESSION)
                    return _error_result(refresh_exc)
                restored = Session.model_validate(body)

            self._set_session(restored)
            await self._emit(AuthEvent.INITIAL_SESSION)
            return AuthResult(identity=self.identity, session=self.session)
        finally:
            self.loading = False

    async def refresh(self) -> AuthResult:
        """Rotate tokens using the refresh token."""
        if self.session is None:
            return AuthResult(error=AuthError(message="No active session"))
        try:
            body = await self._client.auth.refresh_session(self.session.refresh_token)
        except SupabaseError as exc:
            logger.warning("Token refresh failed: %s", exc.message)
            return _error_result(exc)
        self._set_session(Session.model_validate(body))
        await self._emit(AuthEvent.TOKEN_REFRESHED)
        return AuthResult(identity=self.identity, session=self.session)

    def dispose(self) -> None:
        """Drop listeners and state without emitting events."""
        self._listeners.clear()
        self._clear()

    # -- Subscriptions --

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            try:
                await listener(event, self.identity)
            except Exception:
                logger.exception("Session listener failed on %s", event.value)

    # -- Operations --

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: SignUpMetadata | dict,
    ) -> AuthResult:
        """Create an account carrying full_name, role and country as metadata.

        The role, the required fields and the password length are checked
        before anything is sent.

        When email confirmation is required the result carries the identity
        but no session.
        """
        if isinstance(metadata, dict):
            raw_role = metadata.get("role")
            meta = {k: metadata.get(k) or "" for k in ("full_name", "country")}
        else:
            raw_role = metadata.role
            meta = {"full_name": metadata.full_name, "country": metadata.country}

        role = parse_role(raw_role)
        if role is None:
            return AuthResult(
                error=AuthError(
                    message=f"Invalid role '{raw_role}'. Must be one of: {_ALLOWED_ROLES}",
                    code="invalid_role",
                )
            )

        error = _registration_error(email, password, meta)
        if error is not None:
            return AuthResult(error=error)

        try:
            body = await self._client.auth.sign_up(email, password, {**meta, "role": role.value})
        except SupabaseError as exc:
            logger.warning("Sign-up failed for %s: %s", email, exc.message)
            return _error_result(exc)

        if body.get("access_token"):
            self._set_session(Session.model_validate(body))
            await self._emit(AuthEvent.SIGNED_IN)
            return AuthResult(identity=self.identity, session=self.session)

        identity = Identity.model_validate(body.get("user") or body)
        logger.info("Sign-up for %s awaiting email confirmation", email)
        return AuthResult(identity=identity)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            body = await self._client.auth.sign_in_with_password(email, password)
        except SupabaseError as exc:
            logger.info("Sign-in failed for %s: %s", email, exc.message)
            return _error_result(exc)
        self._set_session(Session.model_validate(body))
        await self._emit(AuthEvent.SIGNED_IN)
        return AuthResult(identity=self.identity, session=self.session)

    async def sign_in_with_oauth(self, provider: str = "google") -> AuthResult:
        """Start an OAuth flow; the result carries the provider redirect URL."""
        verifier, challenge = generate_pkce_pair()
        self._pkce_verifier = verifier
        url = self._client.auth.authorize_url(provider, f"{self._site_url}/", challenge)
        return AuthResult(url=url)

    async def exchange_code(self, code: str) -> AuthResult:
        """Finish the OAuth flow started by ``sign_in_with_oauth``."""
        if self._pkce_verifier is None:
            return AuthResult(error=AuthError(message="No OAuth sign-in in progress"))
        try:
            body = await self._client.auth.exchange_code(code, self._pkce_verifier)
        except SupabaseError as exc:
            logger.warning("OAuth code exchange failed: %s", exc.message)
            return _error_result(exc)
        finally:
            self._pkce_verifier = None
        self._set_session(Session.model_validate(body))
        await self._emit(AuthEvent.SIGNED_IN)
        return AuthResult(identity=self.identity, session=self.session)

    async def resend_verification(self, email: str | None = None) -> AuthResult:
        email = email or (self.identity.email if self.identity else None)
        if not email:
            return AuthResult(error=AuthError(message="No email address to verify"))
        try:
            await self._client.auth.resend(email, "signup", redirect_to=f"{self._site_url}/")
        except SupabaseError as exc:
            logger.warning("Verification resend failed for %s: %s", email, exc.message)
            return _error_result(exc)
        return AuthResult(identity=self.identity)

    async def sign_out(self) -> str:
        """Sign out and return the route to navigate to.

        Local state is cleared even when the provider call fails.
        """
        token = self.session.access_token if self.session else None
        try:
            if token:
                await self._client.auth.sign_out(token)
        except SupabaseError as exc:
            logger.warning("Provider sign-out failed, clearing local session anyway: %s", exc.message)
        finally:
            self._clear()
        await self._emit(AuthEvent.SIGNED_OUT)
        return HOME_PATH

    # -- State --

    @property
    def access_token(self) -> str | None:
        return self.session.access_token if self.session else None

    def set_profile(self, profile: Profile | None) -> None:
        self.profile = profile

    def _set_session(self, session: Session) -> None:
        if self.identity is not None and self.identity.id != session.user.id:
            self.profile = None
        self.session = session
        self.identity = session.user
        self._client.set_access_token(session.access_token)

    def _clear(self) -> None:
        self.session = None
        self.identity = None
        self.profile = None
        self._client.set_access_token(None)
