"""Global identifier and cursor codecs.

A global id is the relay-style base64 encoding of
``"<collection name>:<JSON array of primary key values>"``. It carries no
process-local state, so ids stay valid across restarts, and distinct
collections never collide because the collection name is part of the payload.
Key parts JSON cannot hold (dates, datetimes, UUIDs) are written as text and
parsed back from the key field types by :func:`deserialize_for`.
"""
from __future__ import annotations

import json
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Tuple

from strawberry.relay import GlobalID

from ..errors import DecodeError

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..interface import Collection

__all__ = [
    'serialize',
    'deserialize',
    'deserialize_for',
    'serialize_cursor',
    'deserialize_cursor',
]


def _dump(payload: Any) -> str:
    # Non JSON-native key parts (UUID, datetime, Decimal) are rendered as text.
    return json.dumps(payload, default=str, separators=(',', ':'))


def _decode(text: Any, what: str) -> Tuple[str, Any]:
    if not isinstance(text, str) or not text:
        raise DecodeError(f"Invalid {what}: expected a non-empty string")
    try:
        gid = GlobalID.from_id(text)
    except ValueError as e:
        raise DecodeError(f"Invalid {what}: {text!r}") from e
    try:
        payload = json.loads(gid.node_id)
    except ValueError as e:
        raise DecodeError(f"Invalid {what} payload: {text!r}") from e
    return gid.type_name, payload


def serialize(collection: 'Collection', value: Any) -> str:
    """Encode the identity of ``value`` within ``collection``."""
    if collection.primary_key is None:
        raise ValueError(f"Collection '{collection.name}' has no primary key")
    key = collection.key_of(value)
    return str(GlobalID(type_name=collection.name, node_id=_dump(list(key))))


def deserialize(id_: str) -> Tuple[str, Tuple[Any, ...]]:
    """Decode a global id into ``(collection_name, key_values)``."""
    name, payload = _decode(id_, 'global id')
    if not isinstance(payload, list) or not payload:
        raise DecodeError(f"Invalid global id payload: {id_!r}")
    return name, tuple(payload)


def deserialize_for(collection: 'Collection', id_: str) -> Tuple[Any, ...]:
    """Decode a global id that must belong to ``collection``."""
    name, key = deserialize(id_)
    if name != collection.name:
        raise DecodeError(
            f"Global id belongs to collection '{name}', expected '{collection.name}'"
        )
    pk = collection.primary_key
    if pk is None or len(key) != len(pk.fields):
        raise DecodeError(f"Global id key does not match the primary key of '{collection.name}'")
    return tuple(
        _restore(collection.type.fields[f].type, part) for f, part in zip(pk.fields, key)
    )


def _restore(value_type: Any, part: Any) -> Any:
    """Turn a key part written as text back into the field's Python value."""
    from ..interface import DATE, DATETIME, UUID, NullableType
    while isinstance(value_type, NullableType):
        value_type = value_type.non_null_type
    if part is None or not isinstance(part, str):
        return part
    parse = {DATE: date.fromisoformat, DATETIME: datetime.fromisoformat, UUID: uuid.UUID}.get(value_type)
    if parse is None:
        return part
    try:
        return parse(part)
    except ValueError as e:
        raise DecodeError(f"Invalid {value_type.name} key value in global id: {part!r}") from e


def serialize_cursor(paginator_name: str, cursor: Any) -> str:
    return str(GlobalID(type_name=paginator_name, node_id=_dump(cursor)))


def deserialize_cursor(paginator_name: str, text: str) -> Any:
    name, cursor = _decode(text, 'cursor')
    if name != paginator_name:
        raise DecodeError(f"Cursor belongs to '{name}', expected '{paginator_name}'")
    return cursor
