"""Node interface, value provenance and the root ``node`` lookup."""
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Any, Optional

import strawberry

from ..core.fields import FieldConfig, annotate
from ..core.identity import deserialize, deserialize_for
from ..core.naming import python_name
from ..core.utils import maybe_await
from ..errors import DecodeError
from ..interface import Collection

try:  # Provide StrawberryInfo for type annotations
    from strawberry.types import Info as StrawberryInfo  # type: ignore
except ImportError:  # pragma: no cover
    from strawberry.types.info import Info as StrawberryInfo  # type: ignore

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..registry import BuildContext

_logger = logging.getLogger("collectionql")

__all__ = [
    'NodeDict',
    'mark_node_value',
    'node_value_collection',
    'get_node_interface',
    'make_is_type_of',
    'node_field',
    'lookup_field',
]

_PROVENANCE_ATTR = '__collectionql_collection__'
_ARG_DESC_ID = "Global identifier of the value."


class NodeDict(dict):
    """A ``dict`` that can carry collection provenance."""


def mark_node_value(value: Any, collection: Collection) -> Any:
    """Tag ``value`` as read from ``collection``; mappings are copied into a :class:`NodeDict`."""
    if value is None:
        return None
    if isinstance(value, Mapping) and not isinstance(value, NodeDict):
        value = NodeDict(value)
    try:
        setattr(value, _PROVENANCE_ATTR, collection.name)
    except AttributeError:
        # slotted or frozen values cannot be tagged; type resolution falls back to is_type_of
        _logger.debug("collectionql: cannot tag %r with collection %s", type(value), collection.name)
    return value


def node_value_collection(value: Any) -> Optional[str]:
    """Name of the collection ``value`` was tagged with, or ``None``."""
    return getattr(value, _PROVENANCE_ATTR, None)


def get_node_interface(context: 'BuildContext') -> type:
    if context.node_interface is not None:
        return context.node_interface
    id_name = context.options.node_id_field_name
    attr = python_name(id_name)
    NodePlain = type('Node', (), {})
    setattr(NodePlain, attr, strawberry.field(name=id_name, description="Globally unique, opaque identifier."))
    NodePlain.__annotations__ = {attr: strawberry.ID}
    context.node_interface = strawberry.interface(
        NodePlain, name='Node', description="A value that can be fetched again by its global identifier."
    )
    return context.node_interface


def make_is_type_of(collection: Collection):
    def is_type_of(cls, obj: Any, info: Any) -> bool:
        tagged = node_value_collection(obj)
        if tagged is not None and tagged != collection.name:
            return False
        return collection.type.is_type_of(obj)
    return classmethod(is_type_of)


def _readable(collection: Collection) -> bool:
    return collection.primary_key is not None and collection.primary_key.read is not None


def node_field(context: 'BuildContext') -> Optional[FieldConfig]:
    """Root ``node(id)`` field, or ``None`` when no collection can be read by id."""
    if not any(_readable(c) for c in context.inventory.get_collections()):
        return None
    inventory = context.inventory

    async def _resolver(self, info, id_):  # noqa: D401
        name, _ = deserialize(id_)
        collection = inventory.get_collection(name)
        if collection is None or not _readable(collection):
            raise DecodeError(f"Global id refers to unknown collection '{name}'")
        key = deserialize_for(collection, id_)
        value = await maybe_await(collection.primary_key.read(info.context, key))
        return mark_node_value(value, collection)

    annotate(
        _resolver,
        info=StrawberryInfo,
        id_=Annotated[strawberry.ID, strawberry.argument(name='id', description=_ARG_DESC_ID)],
    )
    return FieldConfig(
        type=Optional[get_node_interface(context)],
        resolve=_resolver,
        description="Fetch any value that has a global identifier.",
    )


def lookup_field(context: 'BuildContext', collection: Collection, node_type: type) -> FieldConfig:
    """Root ``<typeName>(id)`` field reading one value of ``collection``."""
    read = collection.primary_key.read

    async def _resolver(self, info, id_):  # noqa: D401
        key = deserialize_for(collection, id_)
        value = await maybe_await(read(info.context, key))
        return mark_node_value(value, collection)

    annotate(
        _resolver,
        info=StrawberryInfo,
        id_=Annotated[strawberry.ID, strawberry.argument(name='id', description=_ARG_DESC_ID)],
    )
    return FieldConfig(
        type=Optional[node_type],
        resolve=_resolver,
        description=f"Fetch one value of '{collection.name}' by its global identifier.",
    )
