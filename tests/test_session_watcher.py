"""Tests for the session watcher."""

from dataclasses import dataclass, field

from fitness_tracker.services.session import SessionProvider
from fitness_tracker.services.session_watcher import (
    SESSION_ENDED_MESSAGE,
    SessionWatcher,
    is_auth_path,
)
from tests.conftest import FakeAuthGateway, make_session


@dataclass
class FakeNavigator:
    path: str = "/(tabs)"
    routes: set[str] = field(default_factory=lambda: {"/(auth)/login", "/"})
    visited: list[str] = field(default_factory=list)

    def current_path(self) -> str:
        return self.path

    def replace(self, path: str) -> None:
        if path not in self.routes:
            raise LookupError(path)
        self.visited.append(path)
        self.path = path


def _watch(
    gateway: FakeAuthGateway, navigator: FakeNavigator
) -> tuple[SessionWatcher, list[str]]:
    provider = SessionProvider(gateway)
    provider.init()
    messages: list[str] = []
    watcher = SessionWatcher(provider, navigator, messages.append)
    watcher.start()
    return watcher, messages


def test_redirects_to_first_available_login_route() -> None:
    navigator = FakeNavigator()

    _, messages = _watch(FakeAuthGateway(), navigator)

    assert navigator.visited == ["/(auth)/login"]
    assert messages == [SESSION_ENDED_MESSAGE]


def test_stays_put_on_auth_routes() -> None:
    navigator = FakeNavigator(path="/login")

    _, messages = _watch(FakeAuthGateway(), navigator)

    assert navigator.visited == []
    assert messages == []


def test_notifies_once_per_session_loss() -> None:
    gateway = FakeAuthGateway(stored=make_session())
    navigator = FakeNavigator(routes={"/"})
    _, messages = _watch(gateway, navigator)
    assert messages == []

    gateway.emit(None)
    navigator.path = "/(tabs)"
    gateway.emit(make_session("t2"))
    gateway.emit(None)

    assert messages == [SESSION_ENDED_MESSAGE, SESSION_ENDED_MESSAGE]
    assert navigator.visited == ["/", "/"]


def test_stop_unsubscribes() -> None:
    gateway = FakeAuthGateway(stored=make_session())
    navigator = FakeNavigator()
    watcher, messages = _watch(gateway, navigator)

    watcher.stop()
    gateway.emit(None)

    assert messages == []


def test_is_auth_path() -> None:
    assert is_auth_path("/(auth)/signup")
    assert is_auth_path("/auth/login")
    assert not is_auth_path("/(tabs)/progress")
    assert not is_auth_path(None)
