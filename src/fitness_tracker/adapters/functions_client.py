"""Authenticated client for the Supabase Edge Function gateway."""

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from fitness_tracker.domain.errors import (
    ApplicationError,
    ConfigurationError,
    NetworkError,
    NotAuthenticatedError,
    RequestAbortedError,
    ResponseShapeError,
)
from fitness_tracker.services.cancellation import CancellationToken

DEFAULT_TIMEOUT_SECONDS = 15.0
_BODY_PREVIEW_CHARS = 200

_logger = logging.getLogger(__name__)


class SessionContext(Protocol):
    """Source of the bearer token for authenticated calls."""

    def access_token(self) -> str | None:
        """Return the current access token, or None when signed out."""


class FunctionsClient(Protocol):
    """Interface for Edge Function calls."""

    async def request(  # noqa: PLR0913
        self,
        function: str,
        *,
        method: str = "GET",
        params: dict[str, object] | None = None,
        body: object | None = None,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> object:
        """Call a function and return its parsed JSON body."""


@dataclass
class HttpxFunctionsClient(FunctionsClient):
    """HTTPX-backed Edge Function client."""

    base_url: str
    anon_key: str
    session: SessionContext
    http_client: httpx.AsyncClient
    default_timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def create(
        cls,
        base_url: str,
        anon_key: str,
        session: SessionContext,
        default_timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "HttpxFunctionsClient":
        """Create a functions client with a managed httpx session."""
        return cls(
            base_url=base_url,
            anon_key=anon_key,
            session=session,
            http_client=httpx.AsyncClient(),
            default_timeout=default_timeout,
        )

    async def request(  # noqa: PLR0913
        self,
        function: str,
        *,
        method: str = "GET",
        params: dict[str, object] | None = None,
        body: object | None = None,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> object:
        """Call a function with the user's bearer token and parse the response."""
        base = self._checked_base_url()
        token = self.session.access_token()
        if not token:
            raise NotAuthenticatedError()
        if cancel is not None and cancel.cancelled:
            raise RequestAbortedError("cancelled")

        headers = {
            "Authorization": f"Bearer {token}",
            "apikey": self.anon_key,
            "Accept": "application/json",
        }
        content: bytes | None = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            content = json.dumps(body).encode()

        resolved_timeout = self.default_timeout if timeout is None else timeout
        request = self.http_client.build_request(
            method,
            f"{base}/{function.lstrip('/')}",
            params=_clean_params(params),
            headers=headers,
            content=content,
            timeout=resolved_timeout,
        )
        response = await self._send(request, cancel, resolved_timeout)
        return _parse_response(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _checked_base_url(self) -> str:
        base = self.base_url.strip().rstrip("/")
        if not base.startswith(("http://", "https://")):
            raise ConfigurationError("Missing/invalid SUPABASE_URL")
        if not self.anon_key:
            raise ConfigurationError("Missing SUPABASE_ANON_KEY")
        return base

    async def _send(
        self,
        request: httpx.Request,
        cancel: CancellationToken | None,
        timeout: float,
    ) -> httpx.Response:
        """Send the request, aborting on timeout or caller cancellation."""
        send_task = asyncio.ensure_future(self.http_client.send(request))
        waiters: set[asyncio.Future] = {send_task}
        cancel_task: asyncio.Future | None = None
        if cancel is not None:
            cancel_task = asyncio.ensure_future(cancel.wait())
            waiters.add(cancel_task)
        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if cancel_task is not None:
                cancel_task.cancel()
            if not send_task.done():
                send_task.cancel()
                with contextlib.suppress(asyncio.CancelledError, httpx.HTTPError):
                    await send_task

        if send_task not in done:
            cancelled = cancel is not None and cancel.cancelled
            reason = "cancelled" if cancelled else "timeout"
            _logger.debug("Request %s aborted: %s", request.url.path, reason)
            raise RequestAbortedError(reason)
        try:
            return send_task.result()
        except httpx.TimeoutException as exc:
            raise RequestAbortedError("timeout") from exc
        except httpx.RequestError as exc:
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc


def _clean_params(params: dict[str, object] | None) -> dict[str, str]:
    if not params:
        return {}
    return {key: str(value) for key, value in params.items() if value is not None}


def _parse_response(response: httpx.Response) -> object:
    """Parse a gateway response body exactly once."""
    raw = response.content
    text = raw.decode("utf-8", errors="replace") if raw else ""
    is_json = "json" in response.headers.get("content-type", "").lower()

    parsed: object | None = None
    parse_failed = False
    if text and is_json:
        try:
            parsed = json.loads(text)
        except ValueError:
            parse_failed = True

    if not response.is_success:
        message = _error_message(parsed) or text[:_BODY_PREVIEW_CHARS].strip()
        raise ApplicationError(
            message or f"HTTP {response.status_code}",
            status_code=response.status_code,
            payload=parsed,
        )

    if not text.strip():
        return {}
    if not is_json or parse_failed:
        raise ResponseShapeError(
            f"Expected JSON response (status {response.status_code}): "
            f"{text[:_BODY_PREVIEW_CHARS]}"
        )
    return parsed


def _error_message(parsed: object) -> str | None:
    if not isinstance(parsed, dict):
        return None
    for key in ("error", "message", "msg"):
        value = parsed.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict):
            nested = value.get("message")
            if isinstance(nested, str) and nested:
                return nested
    return None
