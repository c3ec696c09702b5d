"""Session provider wrapping the auth backend."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from fitness_tracker.domain.auth import AuthResult, AuthSession

SessionListener = Callable[[AuthSession | None], None]

_logger = logging.getLogger(__name__)


class AuthGateway(Protocol):
    """Interface for the auth backend."""

    def get_session(self) -> AuthSession | None:
        """Return the stored session, if any."""

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password."""

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Register a new account."""

    def sign_out(self) -> None:
        """Sign out and drop the stored session."""

    def on_change(self, callback: SessionListener) -> Callable[[], None]:
        """Subscribe to session changes and return an unsubscribe callable."""


@dataclass
class SessionProvider:
    """Holds the current session and forwards auth operations.

    Passed explicitly to the request executor; every session change is
    fanned out to subscribed listeners.
    """

    gateway: AuthGateway
    session: AuthSession | None = None
    error: str | None = None
    loading: bool = True
    _listeners: list[SessionListener] = field(default_factory=list)
    _unsubscribe: Callable[[], None] | None = None

    def init(self) -> None:
        """Load the stored session and follow backend session changes."""
        try:
            self._set_session(self.gateway.get_session())
            if self._unsubscribe is None:
                self._unsubscribe = self.gateway.on_change(self._set_session)
        except Exception as exc:
            _logger.exception("Auth init failed")
            self.error = str(exc) or "Auth init failed"
        finally:
            self.loading = False

    def close(self) -> None:
        """Stop following backend session changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def access_token(self) -> str | None:
        """Return the current access token."""
        return self.session.access_token if self.session else None

    def user_id(self) -> str | None:
        """Return the signed-in user's id."""
        return self.session.user_id if self.session else None

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in; failures are returned on the result, never raised."""
        self.error = None
        result = self.gateway.sign_in(email.strip(), password)
        if result.error:
            self.error = result.error
            return result
        self._set_session(result.session)
        return result

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Sign up; a result without session means confirmation is pending."""
        self.error = None
        result = self.gateway.sign_up(email.strip(), password)
        if result.error:
            self.error = result.error
            return result
        self._set_session(result.session)
        return result

    def sign_out(self) -> None:
        """Sign out and clear the session."""
        self.gateway.sign_out()
        self._set_session(None)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a session listener and return its unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_session(self, session: AuthSession | None) -> None:
        changed = session != self.session
        self.session = session
        if not changed:
            return
        for listener in list(self._listeners):
            listener(session)
