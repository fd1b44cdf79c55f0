"""
CBOR Encoding/Decoding for the SurrealDB RPC wire format.

Requests and responses travel as CBOR documents. SurrealDB extends plain
CBOR with custom tags for its own value types:

- TAG_NONE (6): NONE (absent value, distinct from NULL)
- TAG_TABLE (7): Table name
- TAG_RECORDID (8): Record ID as ``[table, id]``
- TAG_STRING_UUID (9): UUID as string
- TAG_STRING_DECIMAL (10): Decimal as string
- TAG_CUSTOM_DATETIME (12): DateTime as ``[seconds, nanoseconds]``
- TAG_STRING_DURATION (13): Duration as string (e.g. ``"1h30m"``)
- TAG_CUSTOM_DURATION (14): Duration as ``[seconds, nanoseconds]``
- TAG_SPEC_UUID (37): UUID as 16 raw bytes
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable
from uuid import UUID

import cbor2
from cbor2 import CBORTag

CBOR_MEDIA_TYPE = "application/cbor"

TAG_NONE = 6
TAG_TABLE = 7
TAG_RECORDID = 8
TAG_STRING_UUID = 9
TAG_STRING_DECIMAL = 10
TAG_CUSTOM_DATETIME = 12
TAG_STRING_DURATION = 13
TAG_CUSTOM_DURATION = 14
TAG_SPEC_UUID = 37

_NANOS = 1_000_000_000


@dataclass(frozen=True)
class RecordId:
    """
    A SurrealDB Record ID (``table:id``).

    Attributes:
        table: The table name
        id: The record identifier (string, int, list or object)
    """

    table: str
    id: Any

    def __str__(self) -> str:
        return f"{self.table}:{self.id}"

    @classmethod
    def parse(cls, value: str) -> RecordId:
        """Parse a ``table:id`` string."""
        table, sep, id_part = value.partition(":")
        if not sep or not table:
            raise ValueError(f"Invalid record ID format: {value}")
        return cls(table=table, id=id_part)


@dataclass(frozen=True)
class Table:
    """A SurrealDB table reference."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Duration:
    """A SurrealDB duration literal, kept in its textual form."""

    value: str

    def __str__(self) -> str:
        return self.value


_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _split_seconds(seconds: int, nanos: int) -> list[int]:
    # Server expects [seconds] when there is no sub-second part.
    return [seconds, nanos] if nanos else [seconds]


def _encode_datetime(value: datetime) -> CBORTag:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    delta = value - _EPOCH
    total_micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    seconds, micros = divmod(total_micros, 1_000_000)
    return CBORTag(TAG_CUSTOM_DATETIME, _split_seconds(seconds, micros * 1000))


def _encode_timedelta(value: timedelta) -> CBORTag:
    total_micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    seconds, micros = divmod(total_micros, 1_000_000)
    return CBORTag(TAG_CUSTOM_DURATION, _split_seconds(seconds, micros * 1000))


def _mark_none(data: Any) -> Any:
    """
    Replace nested ``None`` values with the NONE tag.

    cbor2 writes ``None`` as CBOR null, which SurrealDB reads as ``NULL``.
    SCHEMAFULL tables with ``option<T>`` fields reject ``NULL`` and expect
    ``NONE``, so dict and list members are rewritten before encoding.
    """
    if data is None:
        return CBORTag(TAG_NONE, None)
    if isinstance(data, dict):
        return {k: _mark_none(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_mark_none(item) for item in data]
    return data


def _default_encoder(encoder: Any, value: Any) -> None:
    """Encode SurrealDB value types that cbor2 does not know about."""
    if isinstance(value, RecordId):
        encoder.encode(CBORTag(TAG_RECORDID, [value.table, value.id]))
    elif isinstance(value, Table):
        encoder.encode(CBORTag(TAG_TABLE, value.name))
    elif isinstance(value, Duration):
        encoder.encode(CBORTag(TAG_STRING_DURATION, value.value))
    else:
        raise TypeError(f"Cannot CBOR encode {type(value)}")


def _decode_record_id(value: Any) -> Any:
    if isinstance(value, list) and len(value) == 2:
        return RecordId(table=value[0], id=value[1])
    if isinstance(value, str):
        return RecordId.parse(value)
    return value


def _decode_custom_datetime(value: Any) -> Any:
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    seconds, nanos = (list(value) + [0, 0])[:2]
    return datetime.fromtimestamp(seconds, tz=UTC) + timedelta(microseconds=nanos // 1000)


def _decode_custom_duration(value: Any) -> timedelta:
    seconds, nanos = (list(value) + [0, 0])[:2]
    return timedelta(seconds=seconds, microseconds=nanos // 1000)


_TAG_DECODERS: dict[int, Callable[[Any], Any]] = {
    TAG_NONE: lambda _value: None,
    TAG_TABLE: lambda value: Table(name=value),
    TAG_RECORDID: _decode_record_id,
    TAG_STRING_UUID: UUID,
    TAG_STRING_DECIMAL: Decimal,
    TAG_CUSTOM_DATETIME: _decode_custom_datetime,
    TAG_STRING_DURATION: lambda value: Duration(value=value),
    TAG_CUSTOM_DURATION: _decode_custom_duration,
    TAG_SPEC_UUID: lambda value: UUID(bytes=bytes(value)),
}


def _tag_hook(decoder: Any, tag: CBORTag) -> Any:
    handler = _TAG_DECODERS.get(tag.tag)
    if handler is None:
        # Unknown tags are passed through untouched
        return tag
    return handler(tag.value)


def _prepare(data: Any) -> Any:
    """Tag values that cbor2 would otherwise encode with its own standard tags."""
    if isinstance(data, datetime):
        return _encode_datetime(data)
    if isinstance(data, timedelta):
        return _encode_timedelta(data)
    if isinstance(data, Decimal):
        return CBORTag(TAG_STRING_DECIMAL, str(data))
    if isinstance(data, UUID):
        return CBORTag(TAG_SPEC_UUID, data.bytes)
    if isinstance(data, dict):
        return {k: _prepare(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_prepare(item) for item in data]
    return data


def encode(data: Any) -> bytes:
    """
    Encode a Python value to CBOR bytes using SurrealDB's custom tags.

    Args:
        data: Python object to encode

    Returns:
        CBOR-encoded bytes
    """
    result: bytes = cbor2.dumps(_mark_none(_prepare(data)), default=_default_encoder)
    return result


def decode(data: bytes) -> Any:
    """
    Decode CBOR bytes into Python values, resolving SurrealDB's custom tags.

    Args:
        data: CBOR-encoded bytes

    Returns:
        Decoded Python object
    """
    return cbor2.loads(data, tag_hook=_tag_hook)
