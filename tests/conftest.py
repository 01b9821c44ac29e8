"""Test fixtures: an in-memory connection layer scripted per test."""

from typing import Callable, Dict, List

import pytest

from http_browser.connection import Connection, ConnectionProvider


class FakeConnection(Connection):
    def __init__(self, provider: "FakeConnectionProvider") -> None:
        self.provider = provider
        self.sent = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, request) -> Dict:
        self.sent.append(request)
        self.provider.requests.append(request)
        status, headers, body = self.provider.handler(request)
        return {"target": request.url, "status": status, "headers": headers, "body": body}

    def close(self) -> None:
        self._closed = True


class FakeConnectionProvider(ConnectionProvider):
    """Answers every request through ``handler(request) -> (status, headers, body)``."""

    def __init__(self, handler: Callable) -> None:
        self.handler = handler
        self.connections: List[FakeConnection] = []
        self.requests = []
        self.proxy_info = None

    def open(self, request) -> FakeConnection:
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection

    def use_proxy(self, proxy_info) -> None:
        self.proxy_info = proxy_info

    @classmethod
    def from_routes(cls, table: Dict[str, tuple]) -> "FakeConnectionProvider":
        """Answers by request URL; unknown URLs get a 404."""

        def handler(request):
            return table.get(request.url, (404, {}, b"not found"))

        return cls(handler)


@pytest.fixture
def fake_provider():
    """The scripted provider class: ``fake_provider(handler)`` or ``fake_provider.from_routes(table)``."""
    return FakeConnectionProvider
