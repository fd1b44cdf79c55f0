"""
HTTP Engine Implementation.

Keeps a logical SurrealDB session (namespace, database, token and
variables) on the client side and replays it as headers on every
stateless HTTP request to the ``/rpc`` endpoint.

Concurrent calls are not serialized. When responses that change the
token (``signin``, ``signup``, ``authenticate``, ``invalidate``) race,
the one that arrives last wins.
"""

import logging
from typing import Any

import httpx

from .base import AbstractEngine, Connection, ConnectionStatus
from ..exceptions import ConnectionUnavailable, HttpConnectionError, MissingNamespaceDatabase
from ..protocol.cbor import CBOR_MEDIA_TYPE
from ..protocol.rpc import ALWAYS_ALLOWED, OMITTED, RpcMethod, RpcRequest, RpcResponse
from ..version import DEFAULT_VERSION_TIMEOUT, retrieve_remote_version

logger = logging.getLogger(__name__)


class HttpEngine(AbstractEngine):
    """
    Stateless HTTP transport with a client-side session.

    ``connect`` performs no handshake; it only records the endpoint.
    ``use``, ``let`` and ``unset`` are answered locally, everything else
    is POSTed to the endpoint as a CBOR envelope.

    Usage:
        engine = HttpEngine()
        await engine.connect("http://localhost:8000/rpc")
        await engine.rpc(RpcRequest("use", ["test", "test"]))
        response = await engine.rpc(RpcRequest("query", ["SELECT * FROM person"]))
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 30.0, **kwargs: Any):
        """
        Initialize the HTTP engine.

        Args:
            client: HTTP client to send requests with. When omitted the engine
                    opens its own on connect and closes it on disconnect.
            timeout: Request timeout in seconds for an engine-owned client
            **kwargs: Collaborators forwarded to AbstractEngine
        """
        super().__init__(**kwargs)
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def connected(self) -> bool:
        return self.connection.url is not None

    @property
    def headers(self) -> dict[str, str]:
        """Request headers derived from the current session."""
        h = {
            "Content-Type": CBOR_MEDIA_TYPE,
            "Accept": CBOR_MEDIA_TYPE,
        }
        if self.connection.namespace:
            h["Surreal-NS"] = self.connection.namespace
        if self.connection.database:
            h["Surreal-DB"] = self.connection.database
        if self.connection.token:
            h["Authorization"] = f"Bearer {self.connection.token}"
        return h

    async def version(self, url: str, timeout: float | None = None) -> str:
        if timeout is None:
            timeout = DEFAULT_VERSION_TIMEOUT
        return await retrieve_remote_version(url, timeout, client=self._client)

    async def connect(self, url: str) -> None:
        """Record ``url`` as the endpoint. Calling again replaces it."""
        self.set_status(ConnectionStatus.CONNECTING)
        self.connection.url = str(url)
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        self.set_status(ConnectionStatus.CONNECTED)
        self._ready.set()

    async def disconnect(self) -> None:
        """Forget the endpoint and every piece of session state."""
        self.connection = Connection()
        self._ready.clear()
        self.set_status(ConnectionStatus.DISCONNECTED)
        if self._owns_client and self._client is not None:
            client, self._client = self._client, None
            await client.aclose()

    async def rpc(self, request: RpcRequest) -> RpcResponse:
        """
        Dispatch an RPC request.

        Raises:
            ConnectionUnavailable: If no endpoint is recorded
            MissingNamespaceDatabase: If the method needs a namespace and database
            HttpConnectionError: If the server answers with a non-200 status
        """
        # Never connected: fail now instead of waiting on readiness forever
        if not self.connected:
            raise ConnectionUnavailable()
        await self._ready.wait()
        if not self.connected:
            raise ConnectionUnavailable()

        method = request.kind
        if (not self.connection.namespace or not self.connection.database) and method not in ALWAYS_ALLOWED:
            raise MissingNamespaceDatabase()

        if method is RpcMethod.USE:
            return self._use(request)
        if method is RpcMethod.LET:
            return self._let(request)
        if method is RpcMethod.UNSET:
            return self._unset(request)
        if method is RpcMethod.QUERY:
            request.params = self._merge_variables(request)

        request.id = self.next_id()
        response = await self._send(request)
        # Envelopes without a result leave the session untouched
        if response.is_success and response.has_result:
            self._apply_result(method, request, response)

        self.emitter.emit(f"rpc-{request.id}", [response])
        return response

    # Local methods

    def _use(self, request: RpcRequest) -> RpcResponse:
        namespace, database = request.param(0), request.param(1)
        if namespace is None:
            self.connection.namespace = None
        elif namespace:
            self.connection.namespace = namespace
        if database is None:
            self.connection.database = None
        elif database:
            self.connection.database = database
        logger.debug("Using namespace=%s database=%s", self.connection.namespace, self.connection.database)
        return RpcResponse(result=True)

    def _let(self, request: RpcRequest) -> RpcResponse:
        key, value = request.param(0), request.param(1)
        self.connection.variables[key] = None if value is OMITTED else value
        return RpcResponse(result=True)

    def _unset(self, request: RpcRequest) -> RpcResponse:
        self.connection.variables.pop(request.param(0), None)
        return RpcResponse(result=True)

    def _merge_variables(self, request: RpcRequest) -> list[Any]:
        query, variables = request.param(0), request.param(1)
        if variables is OMITTED or variables is None:
            variables = {}
        return [query, {**self.connection.variables, **variables}]

    # Remote methods

    async def _send(self, request: RpcRequest) -> RpcResponse:
        if self._client is None:
            raise ConnectionUnavailable()

        logger.debug("RPC %s id=%s -> %s", request.method, request.id, self.connection.url)
        raw = await self._client.post(
            self.connection.url,
            content=self.encode_cbor(request.to_dict()),
            headers=self.headers,
        )
        buffer = raw.content

        if raw.status_code != 200:
            text = buffer.decode("utf-8", errors="replace")
            logger.warning(
                "RPC %s id=%s failed: HTTP %s %s", request.method, request.id, raw.status_code, raw.reason_phrase
            )
            raise HttpConnectionError(text, raw.status_code, raw.reason_phrase, buffer)

        return RpcResponse.from_dict(self.decode_cbor(buffer))

    def _apply_result(self, method: RpcMethod | None, request: RpcRequest, response: RpcResponse) -> None:
        """Update the token from a successful authentication response."""
        if method in (RpcMethod.SIGNIN, RpcMethod.SIGNUP):
            self.connection.token = response.result
        elif method is RpcMethod.AUTHENTICATE:
            token = request.param(0)
            self.connection.token = None if token is OMITTED else token
        elif method is RpcMethod.INVALIDATE:
            self.connection.token = None
