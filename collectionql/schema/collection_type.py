"""Output types generated for collections.

``get_collection_output_type`` returns immediately with a shell class that is
cached per collection; the field list is computed later by the registry, in
this order: identity, intrinsic fields, hook-provided fields, reverse relation
fields, forward connection fields. Any name produced twice is a
:class:`~collectionql.errors.FieldNameCollisionError`.
"""
import logging
from typing import TYPE_CHECKING, Any, Dict

import strawberry

from ..core.fields import FieldConfig, merge_field_entries
from ..core.identity import serialize
from ..core.naming import format_type
from ..interface import Collection
from .connection import forward_relation_field_sources
from .node import get_node_interface, make_is_type_of
from .output_types import object_field_sources
from .relations import reverse_relation_field_sources

try:  # Provide StrawberryInfo for type annotations
    from strawberry.types import Info as StrawberryInfo  # type: ignore
except ImportError:  # pragma: no cover
    from strawberry.types.info import Info as StrawberryInfo  # type: ignore

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..registry import BuildContext

_logger = logging.getLogger("collectionql")

__all__ = ['get_collection_output_type']


def _make_id_resolver(collection: Collection):
    def _resolver(self, info: StrawberryInfo):  # noqa: D401
        return serialize(collection, self)
    return _resolver


def _collection_fields(context: 'BuildContext', collection: Collection, type_name: str) -> Dict[str, FieldConfig]:
    sources: list = []
    if collection.primary_key is not None:
        id_config = FieldConfig(
            type=strawberry.ID,
            resolve=_make_id_resolver(collection),
            description="Globally unique, opaque identifier.",
        )
        sources.append(('identity field', [(context.options.node_id_field_name, id_config)]))
    sources.extend(object_field_sources(context, collection.type))
    hook = context.hooks.object_type_field_entries
    if hook is not None:
        sources.append(('object_type_field_entries hook', hook(collection.type, context)))
    sources.extend(reverse_relation_field_sources(context, collection))
    sources.extend(forward_relation_field_sources(context, collection))
    return merge_field_entries(type_name, sources)


def get_collection_output_type(context: 'BuildContext', collection: Collection) -> Any:
    cached = context.collection_types.get(collection.name)
    if cached is not None:
        return cached
    type_name = format_type(collection.type.name)
    bases = (get_node_interface(context),) if collection.primary_key is not None else ()
    shell = type(type_name, bases, {'is_type_of': make_is_type_of(collection)})
    context.collection_types[collection.name] = shell

    def _fields():
        return _collection_fields(context, collection, type_name)
    context.registry.define(
        type_name,
        shell,
        _fields,
        description=collection.description or collection.type.description,
    )
    _logger.debug("collectionql: created output type %s for collection %s", type_name, collection.name)
    return shell
