"""
SurrealDB Engine - an HTTP RPC driver for SurrealDB.

Talks to SurrealDB's ``/rpc`` endpoint with CBOR-encoded requests and
keeps the logical session (namespace, database, token, variables) on
the client, replaying it as headers on every stateless request.

Usage:
    async with Surreal() as db:
        await db.connect("http://localhost:8000", namespace="test", database="test")
        await db.signin(user="root", password="root")
        result = await db.query("SELECT * FROM person")
"""

from .client import Surreal, rpc_url
from .config import EngineConfig
from .engine import AbstractEngine, Connection, ConnectionStatus, HttpEngine
from .events import Emitter
from .ids import next_incremental_id
from .protocol import (
    ALWAYS_ALLOWED,
    CBOR_MEDIA_TYPE,
    LOCAL_METHODS,
    OMITTED,
    Duration,
    RecordId,
    RpcError,
    RpcMethod,
    RpcRequest,
    RpcResponse,
    Table,
)
from .types import QueryResponse, QueryResult, ResponseStatus
from .version import is_version_supported, retrieve_remote_version
from .exceptions import (
    ConnectionUnavailable,
    EngineDisconnected,
    HttpConnectionError,
    MissingNamespaceDatabase,
    ResponseError,
    SurrealError,
    UnsupportedVersion,
    VersionRetrievalFailure,
)

__version__ = "0.1.0"
__all__ = [
    # Client
    "Surreal",
    "rpc_url",
    "EngineConfig",
    # Engines
    "AbstractEngine",
    "Connection",
    "ConnectionStatus",
    "HttpEngine",
    "Emitter",
    "next_incremental_id",
    # Protocol
    "ALWAYS_ALLOWED",
    "LOCAL_METHODS",
    "OMITTED",
    "RpcError",
    "RpcMethod",
    "RpcRequest",
    "RpcResponse",
    # CBOR Types
    "CBOR_MEDIA_TYPE",
    "Duration",
    "RecordId",
    "Table",
    # Response Types
    "QueryResponse",
    "QueryResult",
    "ResponseStatus",
    # Version
    "is_version_supported",
    "retrieve_remote_version",
    # Exceptions
    "ConnectionUnavailable",
    "EngineDisconnected",
    "HttpConnectionError",
    "MissingNamespaceDatabase",
    "ResponseError",
    "SurrealError",
    "UnsupportedVersion",
    "VersionRetrievalFailure",
]
