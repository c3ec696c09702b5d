"""Supabase Auth adapter."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import AuthError, Client

from fitness_tracker.domain.auth import AuthResult, AuthSession
from fitness_tracker.services.session import AuthGateway

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Auth gateway backed by the Supabase client."""

    client: Client

    def get_session(self) -> AuthSession | None:
        """Return the stored session, if any."""
        return to_auth_session(self.client.auth.get_session())

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            return AuthResult(error=_auth_message(exc))
        session = to_auth_session(response.session)
        return AuthResult(session=session, user_id=_user_id(response.user))

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Register a new account."""
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except AuthError as exc:
            return AuthResult(error=_auth_message(exc))
        session = to_auth_session(response.session)
        return AuthResult(session=session, user_id=_user_id(response.user))

    def sign_out(self) -> None:
        """Sign out and drop the stored session."""
        self.client.auth.sign_out()

    def on_change(
        self, callback: Callable[[AuthSession | None], None]
    ) -> Callable[[], None]:
        """Subscribe to auth state changes."""

        def _listener(_event: object, session: object) -> None:
            callback(to_auth_session(session))

        subscription = self.client.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe


def to_auth_session(raw: object) -> AuthSession | None:
    """Convert a Supabase session object to the domain session."""
    if raw is None:
        return None
    token = getattr(raw, "access_token", None)
    if not token:
        return None
    user = getattr(raw, "user", None)
    expires_at = getattr(raw, "expires_at", None)
    return AuthSession(
        access_token=str(token),
        user_id=_user_id(user) or "",
        email=getattr(user, "email", None),
        expires_at=(
            datetime.fromtimestamp(expires_at, tz=UTC)
            if isinstance(expires_at, int | float)
            else None
        ),
    )


def _user_id(user: object) -> str | None:
    user_id = getattr(user, "id", None)
    return str(user_id) if user_id else None


def _auth_message(exc: AuthError) -> str:
    message = getattr(exc, "message", None) or str(exc)
    _logger.info("Auth request rejected: %s", message)
    return message
