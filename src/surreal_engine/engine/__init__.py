"""
SurrealDB Engine Module.

Transport engines that carry RPC calls to SurrealDB.
"""

from .base import AbstractEngine, Connection, ConnectionStatus
from .http import HttpEngine

__all__ = [
    "AbstractEngine",
    "Connection",
    "ConnectionStatus",
    "HttpEngine",
]
