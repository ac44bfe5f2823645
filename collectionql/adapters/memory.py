"""In-memory paginator and key reader.

Useful for tests, fixtures and small static collections. Values are read from
a sequence, or from ``source(context)`` on every call, and filtered with
:func:`collectionql.core.conditions.matches`.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from ..core.conditions import Condition, matches
from ..core.pagination import OffsetPaginator
from ..interface import CollectionKey, ObjectType

__all__ = ['MemoryPaginator', 'memory_key_reader']

ValueSource = Union[Iterable[Any], Callable[[Any], Iterable[Any]]]


def _values(source: ValueSource, context: Any) -> List[Any]:
    if callable(source):
        return list(source(context))
    return list(source)


def _field_getter(object_type: ObjectType) -> Callable[[Any, str], Any]:
    def get_field(value: Any, name: str) -> Any:
        f = object_type.fields.get(name)
        if f is None:
            raise ValueError(f"Unknown condition field: {name}")
        return f.get_value(value)
    return get_field


class MemoryPaginator(OffsetPaginator):
    """Paginates a list of values in their given order."""

    def __init__(self, name: str, object_type: ObjectType, values: ValueSource):
        self.name = name
        self.object_type = object_type
        self._source = values
        self._get_field = _field_getter(object_type)

    def _filtered(self, context: Any, condition: Condition) -> List[Any]:
        return [v for v in _values(self._source, context) if matches(condition, v, self._get_field)]

    def count(self, context: Any, condition: Condition) -> int:
        return len(self._filtered(context, condition))

    def fetch(self, context: Any, condition: Condition, offset: int, limit: Optional[int]) -> List[Any]:
        rows = self._filtered(context, condition)
        if limit is None:
            return rows[offset:]
        return rows[offset:offset + limit]


def memory_key_reader(object_type: ObjectType, key: Union[CollectionKey, Iterable[str]], values: ValueSource):
    """Build a ``read(context, key_values)`` function for a :class:`CollectionKey`."""
    fields = tuple(key.fields) if isinstance(key, CollectionKey) else tuple(key)

    def read(context: Any, key_values: Tuple[Any, ...]) -> Any:
        wanted = tuple(key_values)
        for v in _values(values, context):
            if tuple(object_type.fields[f].get_value(v) for f in fields) == wanted:
                return v
        return None
    return read
