"""Cooperative cancellation for in-flight requests."""

import asyncio


class CancellationToken:
    """Caller-owned abort signal passed alongside a request."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """Return True once ``cancel`` has been called."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Abort every request carrying this token."""
        self._event.set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()
