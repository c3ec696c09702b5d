"""Search-as-you-type where each keystroke supersedes the previous query."""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from fitness_tracker.domain.errors import RequestAbortedError
from fitness_tracker.domain.meals import Product
from fitness_tracker.services.cancellation import CancellationToken
from fitness_tracker.services.fitness_api import (
    MIN_SEARCH_CHARS,
    FitnessApi,
    normalize_query,
)

DEFAULT_DEBOUNCE_SECONDS = 0.35

ResultT = TypeVar("ResultT")
SearchRunner = Callable[[str, CancellationToken], Awaitable[list[ResultT]]]

_logger = logging.getLogger(__name__)


class SupersedingSearch(Generic[ResultT]):
    """Debounces queries and aborts the in-flight request on each new one.

    ``submit`` resolves to the results of its query, or to None when a newer
    submission replaced it or its request was aborted.
    """

    def __init__(
        self,
        run: SearchRunner,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        min_chars: int = MIN_SEARCH_CHARS,
    ) -> None:
        self.run = run
        self.debounce_seconds = debounce_seconds
        self.min_chars = min_chars
        self._current: CancellationToken | None = None

    async def submit(self, query: str | None) -> list[ResultT] | None:
        """Search for ``query`` once the debounce window has passed."""
        self.cancel()
        if len(normalize_query(query)) < self.min_chars:
            return []

        token = CancellationToken()
        self._current = token
        if self.debounce_seconds > 0:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(token.wait(), timeout=self.debounce_seconds)
        if token.cancelled:
            return None

        try:
            results = await self.run((query or "").strip(), token)
        except RequestAbortedError as exc:
            _logger.debug("Search %r aborted: %s", query, exc.reason)
            return None
        finally:
            if self._current is token:
                self._current = None
        if token.cancelled:
            return None
        return results

    def cancel(self) -> None:
        """Abort the pending submission, if any."""
        if self._current is not None:
            self._current.cancel()
            self._current = None


def food_search(
    api: FitnessApi, debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
) -> SupersedingSearch[Product]:
    """Return a superseding search over the food catalog."""

    async def run(query: str, token: CancellationToken) -> list[Product]:
        return await api.search_foods(query, cancel=token)

    return SupersedingSearch(run, debounce_seconds=debounce_seconds)
