"""Reverse relation fields: from a tail value to the head value it refers to."""
import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..core.fields import FieldConfig, FieldEntry
from ..core.naming import format_field
from ..core.utils import maybe_await
from ..interface import Collection, CollectionKey, Relation

try:  # Provide StrawberryInfo for type annotations
    from strawberry.types import Info as StrawberryInfo  # type: ignore
except ImportError:  # pragma: no cover
    from strawberry.types.info import Info as StrawberryInfo  # type: ignore

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..registry import BuildContext

_logger = logging.getLogger("collectionql")

__all__ = ['reverse_relation_field_sources']


def _make_reverse_resolver(relation: Relation, head_key: CollectionKey):
    get_key = relation.get_head_key_from_tail_value
    read = head_key.read

    async def _resolver(self, info: StrawberryInfo):  # noqa: D401
        key = get_key(self)
        if key is None:
            return None
        key = tuple(key)
        if any(part is None for part in key):
            return None
        return await maybe_await(read(info.context, key))
    return _resolver


def reverse_relation_field_sources(context: 'BuildContext', collection: Collection) -> List[Tuple[str, List[FieldEntry]]]:
    """Single-value fields for relations whose tail is ``collection``, in registration order."""
    from .collection_type import get_collection_output_type
    sources = []
    for relation in context.inventory.get_relations():
        if relation.tail_collection is not collection:
            continue
        head_key = relation.head_collection_key
        if head_key is None or head_key.read is None or relation.get_head_key_from_tail_value is None:
            _logger.debug(
                "collectionql: skipping reverse field for relation %s on %s (no readable head key)",
                relation.name, collection.name,
            )
            continue
        head = relation.head_collection
        head_type = get_collection_output_type(context, head)
        name = format_field(f"{head.type.name}-by-{relation.name}")
        config = FieldConfig(
            type=Optional[head_type],
            resolve=_make_reverse_resolver(relation, head_key),
            description=f"The '{head.name}' value this one refers to through '{relation.name}'.",
        )
        sources.append((f"relation '{relation.name}'", [(name, config)]))
    return sources
