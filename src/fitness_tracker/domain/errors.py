"""Error taxonomy for the fitness tracker client."""


class FitnessApiError(Exception):
    """Base class for errors raised by the client layer."""


class ConfigurationError(FitnessApiError):
    """Gateway URL or API key is missing or invalid."""


class NotAuthenticatedError(FitnessApiError):
    """No active session when an authenticated call was made."""

    def __init__(self, message: str = "Not signed in") -> None:
        super().__init__(message)


class InputValidationError(FitnessApiError):
    """Input rejected locally before any request was sent."""


class TransportError(FitnessApiError):
    """The request never produced an HTTP response."""


class NetworkError(TransportError):
    """Connection-level failure (DNS, refused, reset, TLS)."""


class RequestAbortedError(TransportError):
    """The request was aborted by its timeout or by the caller."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Request aborted ({reason})")
        self.reason = reason

    @property
    def timed_out(self) -> bool:
        """Return True when the timeout, not the caller, aborted the request."""
        return self.reason == "timeout"


class ApplicationError(FitnessApiError):
    """The gateway answered with a non-2xx status."""

    def __init__(
        self, message: str, status_code: int, payload: object | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ResponseShapeError(FitnessApiError):
    """A successful response did not carry the expected JSON body."""
