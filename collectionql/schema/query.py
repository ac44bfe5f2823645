"""Root ``Query`` type: node lookup, per-collection connections and lookups."""
import logging
from typing import TYPE_CHECKING, List, Tuple

from ..core.fields import FieldEntry, merge_field_entries
from ..core.naming import format_field
from ..errors import SchemaConfigurationError
from .collection_type import get_collection_output_type
from .connection import connection_field
from .node import lookup_field, node_field

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..registry import BuildContext

_logger = logging.getLogger("collectionql")

__all__ = ['create_query_type']


def create_query_type(context: 'BuildContext') -> type:
    sources: List[Tuple[str, List[FieldEntry]]] = []
    node = node_field(context)
    if node is not None:
        sources.append(('node lookup', [('node', node)]))
    collections = context.inventory.get_collections()
    for c in collections:
        if c.paginator is None:
            continue
        config = connection_field(context, c, description=f"All values of '{c.name}'.")
        sources.append((f"collection '{c.name}' connection", [(format_field(f"all-{c.name}"), config)]))
    for c in collections:
        if c.primary_key is None or c.primary_key.read is None:
            continue
        node_type = get_collection_output_type(context, c)
        sources.append((f"collection '{c.name}' lookup", [(format_field(c.type.name), lookup_field(context, c, node_type))]))
    fields = merge_field_entries('Query', sources)
    if not fields:
        raise SchemaConfigurationError("Query type has no fields: no collection has a paginator or a readable primary key")
    QueryPlain = type('Query', (), {})
    context.registry.define('Query', QueryPlain, lambda: fields)
    _logger.debug("collectionql: query fields %s", ', '.join(fields))
    return QueryPlain
