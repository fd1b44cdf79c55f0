"""
Base Engine Interface for the SurrealDB client.

Defines the abstract interface every transport engine implements, the
connection status values observers see, and the session record an
engine owns.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Self

from ..events import Emitter, Listener
from ..ids import next_incremental_id
from ..protocol import cbor as cbor_module
from ..protocol.rpc import RpcRequest, RpcResponse

logger = logging.getLogger(__name__)

Encoder = Callable[[Any], bytes]
Decoder = Callable[[bytes], Any]


class ConnectionStatus(StrEnum):
    """Observable connection states. Each value doubles as its event name."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class Connection:
    """
    Logical session state carried across stateless requests.

    Attributes:
        url: Endpoint RPC calls are sent to; None until connected
        namespace: Selected namespace
        database: Selected database
        token: Bearer token from the last successful authentication
        variables: Values merged into every query call
    """

    url: str | None = None
    namespace: str | None = None
    database: str | None = None
    token: str | None = None
    variables: dict[str, Any] = field(default_factory=dict)


class AbstractEngine(ABC):
    """
    Abstract base class for transport engines.

    An engine owns exactly one ``Connection`` and one ``Emitter``. Several
    engines can live side by side in one process without sharing state.
    """

    def __init__(
        self,
        emitter: Emitter | None = None,
        encoder: Encoder = cbor_module.encode,
        decoder: Decoder = cbor_module.decode,
        id_generator: Callable[[], int] = next_incremental_id,
    ):
        """
        Initialize engine collaborators.

        Args:
            emitter: Observer registry; a private one is created when omitted
            encoder: Serializes request envelopes for the wire
            decoder: Parses response bodies from the wire
            id_generator: Produces correlation identifiers
        """
        self.emitter = emitter or Emitter()
        self.encode_cbor = encoder
        self.decode_cbor = decoder
        self.next_id = id_generator
        self.connection = Connection()
        self._status = ConnectionStatus.DISCONNECTED
        self._ready = asyncio.Event()

    @property
    def status(self) -> ConnectionStatus:
        """Current connection status."""
        return self._status

    def set_status(self, status: ConnectionStatus, *args: Any) -> None:
        """Record a status transition and notify its listeners."""
        logger.debug("Engine status %s -> %s", self._status, status)
        self._status = status
        self.emitter.emit(status, args)

    def subscribe(self, event: str, listener: Listener) -> Listener:
        """Register a listener for a status event or an ``rpc-<id>`` completion."""
        return self.emitter.subscribe(event, listener)

    def unsubscribe(self, event: str, listener: Listener) -> bool:
        return self.emitter.unsubscribe(event, listener)

    async def wait_for_response(self, request_id: int) -> RpcResponse:
        """
        Wait for the response of the request with ``request_id``.

        Ids come from the engine's ``id_generator``, so callers that need
        to correlate ahead of time inject a generator they control.
        """
        (response,) = await self.emitter.wait_for(f"rpc-{request_id}")
        return response

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether an endpoint is currently recorded."""
        ...

    # Abstract methods that must be implemented

    @abstractmethod
    async def connect(self, url: str) -> None:
        """Record the endpoint and make the engine ready for RPC calls."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Reset the session and stop accepting RPC calls."""
        ...

    @abstractmethod
    async def rpc(self, request: RpcRequest) -> RpcResponse:
        """
        Dispatch an RPC request and return its response.

        Args:
            request: The RPC request to send

        Returns:
            The RPC response
        """
        ...

    @abstractmethod
    async def version(self, url: str, timeout: float | None = None) -> str:
        """Query the version of the server at ``url``."""
        ...

    # Context manager support

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
