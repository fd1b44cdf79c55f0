"""
SurrealDB RPC Protocol.

Request and response envelopes exchanged with the ``/rpc`` endpoint, and
the closed set of method names the engine knows how to treat specially.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from . import cbor as cbor_module


class _Omitted:
    """Marker for a positional parameter the caller left out."""

    _instance: "_Omitted | None" = None

    def __new__(cls) -> "_Omitted":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OMITTED"

    def __bool__(self) -> bool:
        return False


OMITTED: Any = _Omitted()


class RpcMethod(StrEnum):
    """RPC method names understood by SurrealDB."""

    # Authentication
    SIGNIN = "signin"
    SIGNUP = "signup"
    AUTHENTICATE = "authenticate"
    INVALIDATE = "invalidate"
    INFO = "info"

    # Session
    USE = "use"
    LET = "let"
    UNSET = "unset"
    PING = "ping"
    VERSION = "version"
    RESET = "reset"

    # CRUD
    SELECT = "select"
    CREATE = "create"
    INSERT = "insert"
    UPDATE = "update"
    UPSERT = "upsert"
    MERGE = "merge"
    PATCH = "patch"
    DELETE = "delete"
    RELATE = "relate"

    # Query
    QUERY = "query"
    GRAPHQL = "graphql"
    RUN = "run"

    @classmethod
    def parse(cls, name: str) -> "RpcMethod | None":
        """Return the known method for ``name``, or None for any other remote method."""
        try:
            return cls(name)
        except ValueError:
            return None


# Methods answered from session state without contacting the server.
LOCAL_METHODS: frozenset[RpcMethod] = frozenset({RpcMethod.USE, RpcMethod.LET, RpcMethod.UNSET})

# Methods permitted before a namespace and database are selected.
ALWAYS_ALLOWED: frozenset[RpcMethod] = frozenset(
    {
        RpcMethod.SIGNIN,
        RpcMethod.SIGNUP,
        RpcMethod.AUTHENTICATE,
        RpcMethod.INVALIDATE,
        RpcMethod.VERSION,
        RpcMethod.USE,
        RpcMethod.LET,
        RpcMethod.UNSET,
        RpcMethod.QUERY,
    }
)


@dataclass
class RpcRequest:
    """
    RPC request envelope.

    Attributes:
        method: RPC method name
        params: Positional parameters
        id: Correlation identifier, assigned by the engine before sending
    """

    method: str
    params: list[Any] = field(default_factory=list)
    id: int | None = None

    @property
    def kind(self) -> RpcMethod | None:
        """The known method this request invokes, None for unknown remote methods."""
        return RpcMethod.parse(self.method)

    def param(self, index: int) -> Any:
        """Positional parameter at ``index``, or OMITTED if the caller left it out."""
        if index < len(self.params):
            return self.params[index]
        return OMITTED

    def to_dict(self) -> dict[str, Any]:
        """Envelope for the wire. Trailing omitted parameters are dropped, inner ones sent as NONE."""
        params = list(self.params)
        while params and params[-1] is OMITTED:
            params.pop()
        return {
            "id": self.id,
            "method": self.method,
            "params": [None if p is OMITTED else p for p in params],
        }

    def to_cbor(self) -> bytes:
        """Serialize the envelope to CBOR bytes."""
        return cbor_module.encode(self.to_dict())


@dataclass
class RpcError:
    """
    RPC error payload.

    Attributes:
        code: Error code
        message: Error message
    """

    code: int
    message: str

    @classmethod
    def from_value(cls, data: Any) -> "RpcError":
        # Older servers send a bare string instead of an object
        if isinstance(data, str):
            return cls(code=-1, message=data)
        return cls(
            code=data.get("code", -1),
            message=data.get("message", "Unknown error"),
        )


@dataclass
class RpcResponse:
    """
    RPC response envelope: either a result or an error.

    Attributes:
        id: Identifier of the request this answers (None for locally answered calls)
        result: Result data when successful
        error: Error payload when failed
        has_result: Whether the envelope carried a ``result`` key
    """

    id: int | None = None
    result: Any = None
    error: RpcError | None = None
    has_result: bool = field(default=True, compare=False)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RpcResponse":
        error = None
        if "error" in data:
            error = RpcError.from_value(data["error"])
        return cls(id=data.get("id"), result=data.get("result"), error=error, has_result="result" in data)

    @classmethod
    def from_cbor(cls, cbor_data: bytes) -> "RpcResponse":
        """Parse from CBOR bytes."""
        data = cbor_module.decode(cbor_data)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a CBOR map as RPC response, got {type(data).__name__}")
        return cls.from_dict(data)
