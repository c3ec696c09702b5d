"""Redirects to the login screen when the session disappears."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from fitness_tracker.domain.auth import AuthSession
from fitness_tracker.services.session import SessionProvider

LOGIN_CANDIDATES = (
    "/login",
    "/(auth)/login",
    "/(auth)",
    "/auth/login",
    "/",
)
AUTH_PREFIXES = ("/(auth)", "/auth", "/login")
SESSION_ENDED_MESSAGE = "Your session ended. Please sign in again."

_logger = logging.getLogger(__name__)


class Navigator(Protocol):
    """Router used by the watcher."""

    def current_path(self) -> str:
        """Return the current route path."""

    def replace(self, path: str) -> None:
        """Replace the current route; raises when the path does not exist."""


def is_auth_path(path: str | None) -> bool:
    """Return True for routes belonging to the auth flow."""
    return (path or "").startswith(AUTH_PREFIXES)


@dataclass
class SessionWatcher:
    """Watches the session provider and sends signed-out users to login."""

    provider: SessionProvider
    navigator: Navigator
    notify: Callable[[str], None]
    _notified: bool = False
    _unsubscribe: Callable[[], None] | None = None

    def start(self) -> None:
        """Check the current session and follow later changes."""
        self._on_session(self.provider.session)
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.subscribe(self._on_session)

    def stop(self) -> None:
        """Stop watching the provider."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_session(self, session: AuthSession | None) -> None:
        if session is not None:
            self._notified = False
            return
        if is_auth_path(self.navigator.current_path()):
            return
        if not self._notified:
            self._notified = True
            self.notify(SESSION_ENDED_MESSAGE)
        self._redirect_to_login()

    def _redirect_to_login(self) -> str | None:
        for path in LOGIN_CANDIDATES:
            try:
                self.navigator.replace(path)
            except Exception:  # noqa: BLE001
                _logger.debug("Login route %s not available", path)
                continue
            _logger.info("Session ended, redirected to %s", path)
            return path
        _logger.warning("No login route matched")
        return None
