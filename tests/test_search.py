"""Tests for superseding search."""

import asyncio

import httpx

from fitness_tracker.domain.errors import RequestAbortedError
from fitness_tracker.services.cancellation import CancellationToken
from fitness_tracker.services.fitness_api import FitnessApi
from fitness_tracker.services.search import SupersedingSearch, food_search
from tests.conftest import FakeFunctionsClient, mock_functions_client


def test_newer_submission_supersedes_in_flight_request() -> None:
    aborted: list[str] = []
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        if query == "chick":
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                aborted.append(query)
                raise
        return httpx.Response(200, json={"products": [{"name": query.title()}]})

    async def scenario() -> tuple[object, object]:
        api = FitnessApi(client=mock_functions_client(handler))
        search = food_search(api, debounce_seconds=0)
        first = asyncio.create_task(search.submit("chick"))
        await started.wait()
        second = await search.submit("chicken")
        return await first, second

    first, second = asyncio.run(scenario())

    assert first is None
    assert [product.name for product in second] == ["Chicken"]
    assert aborted == ["chick"]


def test_submission_during_debounce_never_runs() -> None:
    queries: list[str] = []

    async def run(query: str, token: CancellationToken) -> list[str]:
        queries.append(query)
        return [query]

    async def scenario() -> tuple[object, object]:
        search = SupersedingSearch(run, debounce_seconds=0.05)
        first = asyncio.create_task(search.submit("pea"))
        await asyncio.sleep(0)
        second = await search.submit("peanut")
        return await first, second

    first, second = asyncio.run(scenario())

    assert first is None
    assert second == ["peanut"]
    assert queries == ["peanut"]


def test_short_query_resolves_to_empty_without_call() -> None:
    client = FakeFunctionsClient()
    search = food_search(FitnessApi(client=client), debounce_seconds=0)

    assert asyncio.run(search.submit("a")) == []
    assert client.calls == []


def test_aborted_run_resolves_to_none() -> None:
    async def run(query: str, token: CancellationToken) -> list[str]:
        raise RequestAbortedError("timeout")

    search = SupersedingSearch(run, debounce_seconds=0)

    assert asyncio.run(search.submit("oats")) is None
