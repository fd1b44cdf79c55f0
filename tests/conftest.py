"""
Pytest configuration for surreal-engine tests.

Unit tests talk to ``FakeSurreal``, an in-process stand-in for the
SurrealDB HTTP API served through ``httpx.MockTransport``. Integration
tests (marked ``integration``) need a real server and are skipped when
none answers on ``SURREALDB_URL``.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest

from surreal_engine.engine.http import HttpEngine
from surreal_engine.protocol.cbor import decode as cbor_decode, encode as cbor_encode

# ---------------------------------------------------------------------------
# Shared connection constants (import these in test files)
# ---------------------------------------------------------------------------
SURREALDB_URL = os.getenv("SURREALDB_URL", "http://localhost:8000")
SURREALDB_USER = os.getenv("SURREALDB_USER", "root")
SURREALDB_PASS = os.getenv("SURREALDB_PASS", "root")
SURREALDB_NAMESPACE = os.getenv("SURREALDB_NAMESPACE", "test")

ENDPOINT = "http://surreal.test/rpc"


class FakeSurreal:
    """
    Minimal SurrealDB HTTP API double.

    ``results`` maps method names to the result returned for them,
    ``errors`` maps method names to an error payload. Setting
    ``status_code`` to anything but 200 makes every RPC fail with
    ``body`` as the raw response. Methods in ``bare`` are answered
    with an envelope carrying only the ``id``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.results: dict[str, Any] = {}
        self.errors: dict[str, Any] = {}
        self.bare: set[str] = set()
        self.status_code = 200
        self.body = b""
        self.version = "surrealdb-2.1.4"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "GET" and request.url.path == "/version":
            return httpx.Response(200, text=self.version)

        if self.status_code != 200:
            return httpx.Response(self.status_code, content=self.body)

        envelope = cbor_decode(request.content)
        method = envelope["method"]
        if method in self.bare:
            payload = {"id": envelope["id"]}
        elif method in self.errors:
            payload = {"id": envelope["id"], "error": self.errors[method]}
        else:
            payload = {"id": envelope["id"], "result": self.results.get(method, True)}
        return httpx.Response(200, content=cbor_encode(payload))

    @property
    def rpc_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def envelope(self, index: int = -1) -> dict[str, Any]:
        """Decoded body of a sent RPC request."""
        data: dict[str, Any] = cbor_decode(self.rpc_requests[index].content)
        return data

    def headers(self, index: int = -1) -> httpx.Headers:
        return self.rpc_requests[index].headers


@pytest.fixture
def server() -> FakeSurreal:
    return FakeSurreal()


@pytest.fixture
async def http_client(server: FakeSurreal) -> AsyncGenerator[httpx.AsyncClient, None]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(server.handler))
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture
def engine(http_client: httpx.AsyncClient) -> HttpEngine:
    """An engine that has not been connected yet."""
    return HttpEngine(client=http_client)


@pytest.fixture
async def ready_engine(engine: HttpEngine) -> HttpEngine:
    """A connected engine with namespace and database selected."""
    await engine.connect(ENDPOINT)
    engine.connection.namespace = "test_ns"
    engine.connection.database = "test_db"
    return engine


def _is_surrealdb_healthy() -> bool:
    try:
        return httpx.get(f"{SURREALDB_URL}/health", timeout=2).status_code == 200
    except httpx.HTTPError:
        return False


@pytest.fixture(scope="session")
def surrealdb_available() -> bool:
    """
    Session-scoped fixture that indicates if SurrealDB is available.

        def test_something(surrealdb_available):
            if not surrealdb_available:
                pytest.skip("SurrealDB not available")
    """
    return _is_surrealdb_healthy()
