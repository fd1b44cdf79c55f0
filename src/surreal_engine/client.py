"""
High-level SurrealDB client.

Wraps an engine with one coroutine per RPC method and turns failure
responses into exceptions.
"""

import logging
from typing import Any, Self

from pydantic import TypeAdapter

from .config import EngineConfig
from .engine.base import AbstractEngine, ConnectionStatus
from .engine.http import HttpEngine
from .events import Listener
from .exceptions import ResponseError
from .protocol.cbor import RecordId, Table
from .protocol.rpc import OMITTED, RpcRequest
from .types import QueryResponse
from .version import DEFAULT_VERSION_TIMEOUT

logger = logging.getLogger(__name__)


def rpc_url(url: str) -> str:
    """
    Normalize a server URL to its HTTP ``/rpc`` endpoint.

    ``ws://host:8000`` and ``http://host:8000/`` both become
    ``http://host:8000/rpc``.
    """
    if url.startswith("ws://"):
        url = url.replace("ws://", "http://", 1)
    elif url.startswith("wss://"):
        url = url.replace("wss://", "https://", 1)
    url = url.rstrip("/")
    if not url.endswith("/rpc"):
        url += "/rpc"
    return url


class Surreal:
    """
    Client for SurrealDB over HTTP.

    Usage:
        async with Surreal() as db:
            await db.connect("http://localhost:8000", namespace="test", database="test")
            await db.signin(user="root", password="root")
            await db.let("min_age", 18)
            result = await db.query("SELECT * FROM person WHERE age >= $min_age")
    """

    def __init__(self, engine: AbstractEngine | None = None):
        self.engine = engine or HttpEngine()

    @classmethod
    async def from_config(cls, config: EngineConfig, engine: AbstractEngine | None = None) -> "Surreal":
        """Create a client and connect it using ``config``."""
        client = cls(engine or HttpEngine(timeout=config.timeout))
        await client.connect(
            config.url,
            namespace=config.namespace,
            database=config.database,
            auth=config.credentials,
            version_check=config.version_check,
            version_check_timeout=config.version_check_timeout,
        )
        return client

    # Connection lifecycle

    @property
    def status(self) -> ConnectionStatus:
        return self.engine.status

    @property
    def connected(self) -> bool:
        return self.engine.connected

    def subscribe(self, event: str, listener: Listener) -> Listener:
        """Register a listener for connection status changes or ``rpc-<id>`` completions."""
        return self.engine.subscribe(event, listener)

    def unsubscribe(self, event: str, listener: Listener) -> bool:
        return self.engine.unsubscribe(event, listener)

    async def connect(
        self,
        url: str,
        namespace: str | None = None,
        database: str | None = None,
        auth: dict[str, Any] | None = None,
        version_check: bool = True,
        version_check_timeout: float = DEFAULT_VERSION_TIMEOUT,
    ) -> Self:
        """
        Connect to a SurrealDB server.

        Args:
            url: Server URL (``http``, ``https``, ``ws`` or ``wss``)
            namespace: Namespace to select after connecting
            database: Database to select after connecting
            auth: Sign-in parameters (``user``, ``pass``, ``ns``, ``db``, ``ac``, ...)
            version_check: Probe the server version before connecting
            version_check_timeout: Timeout in seconds for the probe

        Raises:
            VersionRetrievalFailure: If the version probe fails
            UnsupportedVersion: If the server version is not supported
        """
        endpoint = rpc_url(url)
        if version_check:
            version = await self.engine.version(endpoint, version_check_timeout)
            logger.info("Connecting to SurrealDB %s at %s", version, endpoint)

        await self.engine.connect(endpoint)

        if namespace or database:
            await self.use(namespace or OMITTED, database or OMITTED)
        if auth:
            await self.rpc("signin", auth)
        return self

    async def close(self) -> None:
        await self.engine.disconnect()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # RPC

    async def rpc(self, method: str, *params: Any) -> Any:
        """
        Execute an RPC call and return its result.

        Raises:
            ResponseError: If the server answers with an error
        """
        response = await self.engine.rpc(RpcRequest(method=method, params=list(params)))
        if response.error is not None:
            raise ResponseError(response.error.message, code=response.error.code)
        return response.result

    # Session

    async def use(self, namespace: str | None = OMITTED, database: str | None = OMITTED) -> None:
        """
        Select a namespace and database.

        Passing None clears a selection; leaving an argument out keeps it.
        """
        await self.rpc("use", namespace, database)

    async def let(self, key: str, value: Any) -> None:
        """Define a variable sent along with every query."""
        await self.rpc("let", key, value)

    async def unset(self, key: str) -> None:
        await self.rpc("unset", key)

    # Authentication

    async def signin(
        self,
        user: str | None = None,
        password: str | None = None,
        namespace: str | None = None,
        database: str | None = None,
        access: str | None = None,
        **credentials: Any,
    ) -> str:
        """
        Sign in and keep the returned token for subsequent requests.

        Args:
            user: Username (for root/namespace/database auth)
            password: Password (for root/namespace/database auth)
            namespace: Optional namespace scope
            database: Optional database scope
            access: Optional access method (for record access auth)
            **credentials: Additional record access fields (email, password, ...)

        Returns:
            The session token
        """
        params: dict[str, Any] = {}
        if user:
            params["user"] = user
        if password:
            params["pass"] = password
        if namespace:
            params["ns"] = namespace
        if database:
            params["db"] = database
        if access:
            params["ac"] = access
        params.update(credentials)

        token: str = await self.rpc("signin", params)
        return token

    async def signup(self, namespace: str, database: str, access: str, **credentials: Any) -> str:
        """Sign up a record user and keep the returned token."""
        params = {"ns": namespace, "db": database, "ac": access, **credentials}
        token: str = await self.rpc("signup", params)
        return token

    async def authenticate(self, token: str) -> None:
        """Authenticate with an existing token."""
        await self.rpc("authenticate", token)

    async def invalidate(self) -> None:
        """Drop the current authentication."""
        await self.rpc("invalidate")

    async def info(self) -> Any:
        """Get the record of the authenticated record user."""
        return await self.rpc("info")

    async def version(self) -> str:
        """Get the server version through the RPC endpoint."""
        result = await self.rpc("version")
        return str(result) if result else ""

    async def ping(self) -> bool:
        await self.rpc("ping")
        return True

    # Queries

    async def query(self, sql: str, vars: dict[str, Any] | None = None) -> QueryResponse:
        """
        Execute SurrealQL. Session variables set with ``let`` are merged
        into ``vars``; keys in ``vars`` win.
        """
        result = await self.rpc("query", sql, vars or {})
        return QueryResponse.from_rpc_result(result)

    async def run(
        self,
        function: str,
        args: list[Any] | None = None,
        version: str | None = None,
        return_type: Any = None,
    ) -> Any:
        """
        Run a SurrealDB function.

        Args:
            function: Function name (``fn::`` is added to bare custom names)
            args: Positional function arguments
            version: Version of a ``ml::`` model to run
            return_type: Optional type to validate the result into

        Usage:
            count = await db.run("count", [[1, 2, 3]], return_type=int)
        """
        if "::" not in function and not function.isidentifier():
            raise ValueError(f"Invalid function name: {function!r}")

        result = await self.rpc("run", function, version, args or [])
        if return_type is not None:
            return TypeAdapter(return_type).validate_python(result)
        return result

    # Records

    @staticmethod
    def _to_thing(thing: str | RecordId | Table) -> RecordId | Table:
        """
        Convert ``"table"`` or ``"table:id"`` to the tagged CBOR value.

        Backtick-escaped IDs (``"table:`7abc`"``) are unescaped.
        """
        if not isinstance(thing, str):
            return thing
        if ":" not in thing:
            return Table(thing)
        table, id_part = thing.split(":", 1)
        if id_part.startswith("`") and id_part.endswith("`"):
            id_part = id_part[1:-1].replace("``", "`")
        return RecordId(table=table, id=id_part)

    async def select(self, thing: str | RecordId | Table) -> Any:
        return await self.rpc("select", self._to_thing(thing))

    async def create(self, thing: str | RecordId | Table, data: dict[str, Any] | None = None) -> Any:
        return await self.rpc("create", self._to_thing(thing), data or OMITTED)

    async def insert(self, table: str | Table, data: list[dict[str, Any]] | dict[str, Any]) -> Any:
        return await self.rpc("insert", self._to_thing(table), data)

    async def update(self, thing: str | RecordId | Table, data: dict[str, Any] | None = None) -> Any:
        """Replace the content of record(s)."""
        return await self.rpc("update", self._to_thing(thing), data or OMITTED)

    async def upsert(self, thing: str | RecordId | Table, data: dict[str, Any] | None = None) -> Any:
        return await self.rpc("upsert", self._to_thing(thing), data or OMITTED)

    async def merge(self, thing: str | RecordId | Table, data: dict[str, Any]) -> Any:
        """Merge ``data`` into record(s), keeping fields not mentioned."""
        return await self.rpc("merge", self._to_thing(thing), data)

    async def patch(self, thing: str | RecordId | Table, patches: list[dict[str, Any]], diff: bool = False) -> Any:
        """Apply JSON Patch operations to record(s)."""
        return await self.rpc("patch", self._to_thing(thing), patches, diff)

    async def delete(self, thing: str | RecordId | Table) -> Any:
        return await self.rpc("delete", self._to_thing(thing))

    async def relate(
        self,
        from_thing: str | RecordId,
        relation: str,
        to_thing: str | RecordId,
        data: dict[str, Any] | None = None,
    ) -> Any:
        """Create a graph edge ``from_thing -> relation -> to_thing``."""
        return await self.rpc(
            "relate",
            self._to_thing(from_thing),
            Table(relation),
            self._to_thing(to_thing),
            data or OMITTED,
        )
