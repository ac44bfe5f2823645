"""Language-neutral data model consumed by the schema builder.

An :class:`Inventory` holds :class:`Collection` values (a named
:class:`ObjectType` with an optional primary key and paginator) and the
:class:`Relation` values linking them. Everything here is assembled once and
treated as immutable while a schema is built from it.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import strawberry
from strawberry.scalars import JSON as ST_JSON

from .core.conditions import Condition
from .core.utils import read_attribute
from .errors import SchemaConfigurationError

__all__ = [
    'ScalarType', 'EnumType', 'NullableType', 'ListType', 'ObjectType', 'ValueType',
    'STRING', 'INTEGER', 'FLOAT', 'BOOLEAN', 'ID', 'JSON', 'DATETIME', 'DATE', 'UUID',
    'Field', 'CollectionKey', 'Collection', 'Relation',
    'PageConfig', 'PageValue', 'Page', 'Paginator', 'Inventory',
]


# --- Value types ---

@dataclass(frozen=True)
class ScalarType:
    name: str
    python_type: Any
    description: Optional[str] = None


@dataclass(frozen=True)
class NullableType:
    non_null_type: 'ValueType'


@dataclass(frozen=True)
class ListType:
    item_type: 'ValueType'


@dataclass(eq=False)
class EnumType:
    """Named enumeration; ``variants`` are the raw values, in order."""

    name: str
    variants: Sequence[Any]
    description: Optional[str] = None


@dataclass(eq=False)
class ObjectType:
    """Ordered record of fields.

    ``is_type_of`` is an optional predicate used to tell apart values of
    object types whose shapes overlap; without it every value is accepted.
    """

    name: str
    fields: Dict[str, 'Field'] = field(default_factory=dict)
    description: Optional[str] = None
    is_type_of_fn: Optional[Callable[[Any], bool]] = None

    def __post_init__(self):
        if not isinstance(self.fields, dict):
            self.fields = {f.name: f for f in self.fields}

    def is_type_of(self, value: Any) -> bool:
        if self.is_type_of_fn is None:
            return True
        return bool(self.is_type_of_fn(value))


ValueType = Union[ScalarType, EnumType, NullableType, ListType, ObjectType]

STRING = ScalarType('String', str)
INTEGER = ScalarType('Int', int)
FLOAT = ScalarType('Float', float)
BOOLEAN = ScalarType('Boolean', bool)
ID = ScalarType('ID', strawberry.ID)
JSON = ScalarType('JSON', ST_JSON)
DATETIME = ScalarType('DateTime', datetime)
DATE = ScalarType('Date', date)
UUID = ScalarType('UUID', uuid.UUID)


@dataclass(eq=False)
class Field:
    """A named, typed accessor ``(value) -> field value``."""

    name: str
    type: ValueType
    description: Optional[str] = None
    getter: Optional[Callable[[Any], Any]] = None

    def get_value(self, value: Any) -> Any:
        if self.getter is not None:
            return self.getter(value)
        return read_attribute(value, self.name)


# --- Collections ---

KeyReader = Callable[[Any, Tuple[Any, ...]], Union[Any, Awaitable[Any]]]


@dataclass(eq=False)
class CollectionKey:
    """Ordered field names that uniquely identify a value of a collection.

    ``read(context, key)`` looks a value up by key and returns ``None`` when
    nothing matches; it may be a coroutine function.
    """

    fields: Tuple[str, ...]
    name: str = 'primary_key'
    read: Optional[KeyReader] = None

    def __post_init__(self):
        self.fields = tuple(self.fields)


@dataclass(eq=False)
class Collection:
    name: str
    type: ObjectType
    description: Optional[str] = None
    primary_key: Optional[CollectionKey] = None
    paginator: Optional['Paginator'] = None

    def key_of(self, value: Any, key: Optional[CollectionKey] = None) -> Tuple[Any, ...]:
        """Tuple of key field values of ``value`` (primary key by default)."""
        key = key or self.primary_key
        if key is None:
            raise ValueError(f"Collection '{self.name}' has no primary key")
        return tuple(self.type.fields[f].get_value(value) for f in key.fields)


@dataclass(eq=False)
class Relation:
    """Directed link from a head collection (the "one" side) to a tail collection.

    ``get_tail_condition_from_head_value(head)`` scopes tail reads to the values
    related to one head value. ``get_head_key_from_tail_value(tail)`` yields the
    head key referenced by one tail value. Either may be absent; fields that
    need a missing capability are simply not generated.
    """

    name: str
    head_collection: Collection
    tail_collection: Collection
    head_key: Optional[CollectionKey] = None
    get_head_key_from_tail_value: Optional[Callable[[Any], Optional[Tuple[Any, ...]]]] = None
    get_tail_condition_from_head_value: Optional[Callable[[Any], Condition]] = None

    @property
    def head_collection_key(self) -> Optional[CollectionKey]:
        return self.head_key or self.head_collection.primary_key


# --- Pagination ---

@dataclass(frozen=True)
class PageConfig:
    first: Optional[int] = None
    last: Optional[int] = None
    before: Any = None
    after: Any = None
    offset: Optional[int] = None


@dataclass
class PageValue:
    value: Any
    cursor: Any


@dataclass
class Page:
    values: List[PageValue]
    has_next_page: bool = False
    has_previous_page: bool = False


class Paginator(ABC):
    """Reads pages of a collection scoped by a condition.

    Both methods may return awaitables. Cursors are opaque JSON-serialisable
    values; the schema layer encodes them for clients.
    """

    name: str = 'paginator'

    @abstractmethod
    def count(self, context: Any, condition: Condition) -> Union[int, Awaitable[int]]:
        raise NotImplementedError

    @abstractmethod
    def read_page(self, context: Any, condition: Condition, config: PageConfig) -> Union[Page, Awaitable[Page]]:
        raise NotImplementedError


# --- Inventory ---

class Inventory:
    """Registry of collections and relations, in registration order."""

    def __init__(self, collections: Iterable[Collection] = (), relations: Iterable[Relation] = ()):
        self._collections: Dict[str, Collection] = {}
        self._relations: List[Relation] = []
        for c in collections:
            self.add_collection(c)
        for r in relations:
            self.add_relation(r)

    def add_collection(self, collection: Collection) -> Collection:
        if collection.name in self._collections:
            raise SchemaConfigurationError(f"Collection '{collection.name}' is already registered")
        # ':' separates the name from the key in global ids and cursors
        if not collection.name or ':' in collection.name:
            raise SchemaConfigurationError(f"Collection name {collection.name!r} must be non-empty and contain no ':'")
        if collection.paginator is not None and ':' in collection.paginator.name:
            raise SchemaConfigurationError(f"Paginator name {collection.paginator.name!r} must not contain ':'")
        if collection.primary_key is not None:
            self._check_key(collection, collection.primary_key)
        self._collections[collection.name] = collection
        return collection

    def get_collection(self, name: str) -> Optional[Collection]:
        return self._collections.get(name)

    def get_collections(self) -> List[Collection]:
        return list(self._collections.values())

    def add_relation(self, relation: Relation) -> Relation:
        for c in (relation.head_collection, relation.tail_collection):
            if self._collections.get(c.name) is not c:
                raise SchemaConfigurationError(
                    f"Relation '{relation.name}' references unregistered collection '{c.name}'"
                )
        head_key = relation.head_collection_key
        if head_key is None and relation.get_tail_condition_from_head_value is None:
            raise SchemaConfigurationError(
                f"Relation '{relation.name}' has neither a head key nor a tail condition function"
            )
        if head_key is not None:
            self._check_key(relation.head_collection, head_key)
        self._relations.append(relation)
        return relation

    def get_relations(self) -> List[Relation]:
        return list(self._relations)

    @staticmethod
    def _check_key(collection: Collection, key: CollectionKey) -> None:
        if not key.fields:
            raise SchemaConfigurationError(f"Key '{key.name}' of collection '{collection.name}' has no fields")
        missing = [f for f in key.fields if f not in collection.type.fields]
        if missing:
            raise SchemaConfigurationError(
                f"Key '{key.name}' of collection '{collection.name}' references unknown fields: {', '.join(missing)}"
            )
