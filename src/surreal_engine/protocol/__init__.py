"""
SurrealDB Engine Protocol Module.

Implements the RPC envelope and its CBOR wire encoding.
"""

from .rpc import ALWAYS_ALLOWED, LOCAL_METHODS, OMITTED, RpcError, RpcMethod, RpcRequest, RpcResponse
from .cbor import (
    CBOR_MEDIA_TYPE,
    Duration,
    RecordId,
    Table,
    encode as cbor_encode,
    decode as cbor_decode,
)

__all__ = [
    # RPC
    "ALWAYS_ALLOWED",
    "LOCAL_METHODS",
    "OMITTED",
    "RpcError",
    "RpcMethod",
    "RpcRequest",
    "RpcResponse",
    # CBOR
    "CBOR_MEDIA_TYPE",
    "Duration",
    "RecordId",
    "Table",
    "cbor_encode",
    "cbor_decode",
]
