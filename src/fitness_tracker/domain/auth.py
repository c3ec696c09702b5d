"""Domain models for authentication."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AuthSession:
    """Signed-in session as seen by the client."""

    access_token: str
    user_id: str
    email: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a sign-in or sign-up attempt."""

    session: AuthSession | None = None
    error: str | None = None
    user_id: str | None = None

    @property
    def ok(self) -> bool:
        """Return True when the attempt did not fail."""
        return self.error is None

    @property
    def confirmation_pending(self) -> bool:
        """Return True when sign-up succeeded but email confirmation is required."""
        return self.error is None and self.session is None
