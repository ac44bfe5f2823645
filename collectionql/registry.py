"""Build context, lazy type registry and the :class:`CollectionSchema` entry point.

Generated types are registered in two steps. A plain shell class is created
and cached under its GraphQL name as soon as anything asks for it, so other
types can reference it right away. Its field list is a thunk evaluated at
most once, when the schema is assembled (or when a caller asks for it
explicitly). That breaks construction cycles between collections that
reference each other without any forward declarations from the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Set

import strawberry

from .core.fields import FieldConfig, FieldEntry
from .core.naming import python_name
from .errors import SchemaConfigurationError
from .interface import Collection, Inventory, ObjectType

try:  # Provide StrawberryConfig for type annotations (optional)
    from strawberry.schema.config import StrawberryConfig  # type: ignore
except ImportError:  # pragma: no cover
    StrawberryConfig = Any  # type: ignore

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .schema.condition_types import ConditionType
    from .schema.output_types import OutputType

# Project logger
_logger = logging.getLogger("collectionql")

__all__ = ['Hooks', 'BuildOptions', 'TypeRegistry', 'BuildContext', 'CollectionSchema']

# Class attributes the registry itself sets on generated shells
_RESERVED_ATTRS = {'is_type_of', 'resolve_type'}

ObjectTypeFieldEntriesHook = Callable[[ObjectType, 'BuildContext'], Optional[Iterable[FieldEntry]]]


@dataclass
class Hooks:
    """Caller-supplied extension points.

    ``object_type_field_entries(object_type, context)`` may return extra
    ``(graphql_name, FieldConfig)`` entries for a collection output type.
    """

    object_type_field_entries: Optional[ObjectTypeFieldEntriesHook] = None


@dataclass
class BuildOptions:
    node_id_field_name: str = 'id'
    hooks: Hooks = field(default_factory=Hooks)


class TypeRegistry:
    """Name-keyed cache of Strawberry shells whose fields are filled in lazily."""

    def __init__(self):
        self._shells: Dict[str, type] = {}
        self._names: Dict[type, str] = {}
        self._thunks: Dict[str, Callable[[], Dict[str, FieldConfig]]] = {}
        self._descriptions: Dict[str, Optional[str]] = {}
        self._fields: Dict[str, Dict[str, FieldConfig]] = {}
        self._evaluating: Set[str] = set()
        self._materialized: Set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._shells

    def get(self, name: str) -> Optional[type]:
        return self._shells.get(name)

    def name_of(self, shell: type) -> str:
        return self._names[shell]

    def define(
        self,
        name: str,
        shell: type,
        thunk: Callable[[], Dict[str, FieldConfig]],
        *,
        description: Optional[str] = None,
    ) -> type:
        if name in self._shells:
            raise SchemaConfigurationError(f"GraphQL type name '{name}' is generated twice")
        self._shells[name] = shell
        self._names[shell] = name
        self._thunks[name] = thunk
        self._descriptions[name] = description
        _logger.debug("collectionql: registered type %s", name)
        return shell

    def fields_of(self, name: str) -> Dict[str, FieldConfig]:
        """Evaluate (once) and return the ordered field map of a registered type."""
        cached = self._fields.get(name)
        if cached is not None:
            return cached
        if name not in self._thunks:
            raise KeyError(name)
        if name in self._evaluating:
            raise SchemaConfigurationError(f"Fields of type '{name}' depend on themselves")
        self._evaluating.add(name)
        try:
            fields = self._thunks[name]()
        finally:
            self._evaluating.discard(name)
        self._fields[name] = fields
        _logger.debug("collectionql: computed %d fields for %s", len(fields), name)
        return fields

    def materialize(self, name: str) -> type:
        """Attach the computed fields to the shell and decorate it with Strawberry."""
        shell = self._shells[name]
        if name in self._materialized:
            return shell
        fields = self.fields_of(name)
        if not fields:
            raise SchemaConfigurationError(f"Type '{name}' has no fields")
        annotations: Dict[str, Any] = {}
        for gql_name, config in fields.items():
            attr = python_name(gql_name)
            if not attr or not attr.isidentifier() or attr in _RESERVED_ATTRS or attr.startswith('__'):
                raise SchemaConfigurationError(f"Field name '{gql_name}' on type '{name}' is not usable")
            if attr in annotations:
                raise SchemaConfigurationError(
                    f"Fields on type '{name}' map to the same attribute '{attr}'"
                )
            annotations[attr] = config.type
            if config.description:
                setattr(shell, attr, strawberry.field(resolver=config.resolve, name=gql_name, description=str(config.description)))
            else:
                setattr(shell, attr, strawberry.field(resolver=config.resolve, name=gql_name))
        shell.__annotations__ = annotations
        desc = self._descriptions.get(name)
        if desc:
            strawberry.type(shell, name=name, description=str(desc))
        else:
            strawberry.type(shell, name=name)
        self._materialized.add(name)
        return shell

    def materialize_all(self) -> List[type]:
        """Materialize every registered type, including ones registered while doing so."""
        while True:
            pending = [n for n in self._shells if n not in self._materialized]
            if not pending:
                break
            for n in pending:
                self.materialize(n)
        return list(self._shells.values())


class BuildContext:
    """Everything one schema build shares: inventory, options and memo caches."""

    def __init__(self, inventory: Inventory, options: Optional[BuildOptions] = None):
        self.inventory = inventory
        self.options = options or BuildOptions()
        self.registry = TypeRegistry()
        # collection name -> shell
        self.collection_types: Dict[str, type] = {}
        # value type -> OutputType
        self.output_types: Dict[Any, 'OutputType'] = {}
        # object type -> ConditionType
        self.condition_types: Dict[Any, 'ConditionType'] = {}
        # collection name -> connection class
        self.connection_types: Dict[str, type] = {}
        self.node_interface: Optional[type] = None

    @property
    def hooks(self) -> Hooks:
        return self.options.hooks

    def collection_for_type(self, object_type: ObjectType) -> Optional[Collection]:
        for c in self.inventory.get_collections():
            if c.type is object_type:
                return c
        return None


class CollectionSchema:
    """Derive a Strawberry schema from an :class:`Inventory`.

    Example:
        schema = CollectionSchema(inventory).to_strawberry()
        result = await schema.execute("{ allPeople { nodes { id name } } }")
    """

    def __init__(self, inventory: Inventory, options: Optional[BuildOptions] = None):
        self.inventory = inventory
        self.options = options or BuildOptions()
        self.context = BuildContext(inventory, self.options)
        self._query: Optional[type] = None

    def build(self, collection: Collection) -> type:
        """Return the (cached) output type of ``collection``."""
        from .schema.collection_type import get_collection_output_type
        return get_collection_output_type(self.context, collection)

    def fields_of(self, collection: Collection) -> Dict[str, FieldConfig]:
        """Ordered field map of a collection output type (evaluates its thunk)."""
        shell = self.build(collection)
        return self.context.registry.fields_of(self.context.registry.name_of(shell))

    def to_strawberry(self, *, strawberry_config: Optional[StrawberryConfig] = None) -> strawberry.Schema:
        from .schema.query import create_query_type
        types = [self.build(c) for c in self.inventory.get_collections()]
        if self._query is None:
            self._query = create_query_type(self.context)
        self.context.registry.materialize_all()
        if strawberry_config is not None:
            return strawberry.Schema(query=self._query, types=types, config=strawberry_config)
        return strawberry.Schema(query=self._query, types=types)
