"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from types import SimpleNamespace

import httpx
import pytest

from fitness_tracker.adapters.functions_client import (
    FunctionsClient,
    HttpxFunctionsClient,
)
from fitness_tracker.config import Settings
from fitness_tracker.domain.auth import AuthResult, AuthSession
from fitness_tracker.domain.goals import GoalRow
from fitness_tracker.services.cancellation import CancellationToken
from fitness_tracker.services.fitness_api import FitnessApi
from fitness_tracker.services.goals import GoalsRepository, GoalsService
from fitness_tracker.services.session import AuthGateway

ANON_KEY = "eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoiYW5vbiJ9.signature"
BASE_URL = "https://example.supabase.co/functions/v1"
USER_ID = "user-1"


def make_session(token: str = "token-1", user_id: str = USER_ID) -> AuthSession:
    return AuthSession(access_token=token, user_id=user_id, email="a@example.com")


@dataclass
class StaticSession:
    """Session context returning a fixed token."""

    token: str | None = "token-1"

    def access_token(self) -> str | None:
        return self.token


@dataclass
class FakeAuthGateway(AuthGateway):
    """In-memory auth backend."""

    stored: AuthSession | None = None
    accounts: dict[str, str] = field(default_factory=dict)
    confirm_sign_ups: bool = False
    fail_on_load: bool = False
    callbacks: list[Callable[[AuthSession | None], None]] = field(
        default_factory=list
    )
    signed_out: int = 0

    def get_session(self) -> AuthSession | None:
        if self.fail_on_load:
            raise RuntimeError("storage unavailable")
        return self.stored

    def sign_in(self, email: str, password: str) -> AuthResult:
        if self.accounts.get(email) != password:
            return AuthResult(error="Invalid login credentials")
        self.stored = make_session()
        return AuthResult(session=self.stored, user_id=USER_ID)

    def sign_up(self, email: str, password: str) -> AuthResult:
        if email in self.accounts:
            return AuthResult(error="User already registered")
        self.accounts[email] = password
        if self.confirm_sign_ups:
            return AuthResult(user_id=USER_ID)
        self.stored = make_session()
        return AuthResult(session=self.stored, user_id=USER_ID)

    def sign_out(self) -> None:
        self.signed_out += 1
        self.stored = None

    def on_change(
        self, callback: Callable[[AuthSession | None], None]
    ) -> Callable[[], None]:
        self.callbacks.append(callback)
        return lambda: self.callbacks.remove(callback)

    def emit(self, session: AuthSession | None) -> None:
        self.stored = session
        for callback in list(self.callbacks):
            callback(session)


@dataclass
class InMemoryGoalsRepository(GoalsRepository):
    """In-memory goals repository for tests."""

    rows: dict[str, dict[str, GoalRow]] = field(default_factory=dict)
    replaced: list[GoalRow] = field(default_factory=list)

    def list_current(self, user_id: str) -> list[GoalRow]:
        return list(self.rows.get(user_id, {}).values())

    def replace_current(self, user_id: str, row: GoalRow) -> None:
        self.replaced.append(row)
        self.rows.setdefault(user_id, {})[row.goal_type] = row


@dataclass
class FakeFunctionsClient(FunctionsClient):
    """Records calls and answers from a table keyed by action or function.

    A response may be a value, an exception to raise, or a callable taking
    the recorded call.
    """

    responses: dict[str, object] = field(default_factory=dict)
    calls: list[dict[str, object]] = field(default_factory=list)

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
        key = str((params or {}).get("action") or function)
        call = {
            "key": key,
            "function": function,
            "method": method,
            "params": dict(params or {}),
            "body": body,
            "cancel": cancel,
            "timeout": timeout,
        }
        self.calls.append(call)
        response = self.responses.get(key, {})
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(call)
        return response

    def keys(self) -> list[str]:
        return [str(call["key"]) for call in self.calls]


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[object]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    payloads: list[object] = field(default_factory=list)
    filters: list[tuple[str, str, object]] = field(default_factory=list)
    orders: list[tuple[str, bool]] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)

    def queue(self, action: str, data: object) -> None:
        """Queue rows, or an exception to raise, for the next ``action``."""
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.payloads.append(payload)
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.filters.append(("eq", column, value))
        return self

    def is_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.filters.append(("is", column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.orders.append((column, desc))
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.actions.append(action)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        if isinstance(data, BaseException):
            raise data
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseAuth:
    session: object | None = None
    listeners: list[Callable[[object, object], None]] = field(default_factory=list)
    unsubscribed: int = 0

    def get_session(self) -> object | None:
        return self.session

    def on_auth_state_change(self, callback):  # type: ignore[no-untyped-def]
        self.listeners.append(callback)

        def unsubscribe() -> None:
            self.unsubscribed += 1

        return SimpleNamespace(unsubscribe=unsubscribe)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    auth: FakeSupabaseAuth = field(default_factory=FakeSupabaseAuth)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def mock_functions_client(
    handler: Callable[[httpx.Request], object],
    *,
    token: str | None = "token-1",
    base_url: str = BASE_URL,
    anon_key: str = ANON_KEY,
    default_timeout: float = 15.0,
) -> HttpxFunctionsClient:
    """Return an executor whose transport is served by ``handler``."""
    return HttpxFunctionsClient(
        base_url=base_url,
        anon_key=anon_key,
        session=StaticSession(token),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        default_timeout=default_timeout,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key=ANON_KEY,
    )


@pytest.fixture
def functions_client() -> FakeFunctionsClient:
    return FakeFunctionsClient()


@pytest.fixture
def api(functions_client: FakeFunctionsClient) -> FitnessApi:
    return FitnessApi(client=functions_client)


@pytest.fixture
def goals_repository() -> InMemoryGoalsRepository:
    return InMemoryGoalsRepository()


@pytest.fixture
def goals_service(goals_repository: InMemoryGoalsRepository) -> GoalsService:
    return GoalsService(repository=goals_repository, current_user_id=lambda: USER_ID)
