"""Relay-style connection types and the fields that return them.

A connection field reads one page from the tail collection's paginator. The
page is wrapped in a :class:`ConnectionValue`; ``edges``, ``nodes`` and
``pageInfo`` are derived from it and ``totalCount`` asks the paginator only
when it is selected.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Callable, List, Optional, Tuple

import strawberry

from ..core.conditions import TRUE, Condition, and_
from ..core.fields import FieldConfig, FieldEntry, annotate
from ..core.identity import deserialize_cursor, serialize_cursor
from ..core.naming import format_field
from ..core.pagination import check_page_config
from ..core.utils import maybe_await
from ..interface import Collection, Page, PageConfig, Paginator
from .condition_types import get_condition_type

try:  # Provide StrawberryInfo for type annotations
    from strawberry.types import Info as StrawberryInfo  # type: ignore
except ImportError:  # pragma: no cover
    from strawberry.types.info import Info as StrawberryInfo  # type: ignore

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..registry import BuildContext

_logger = logging.getLogger("collectionql")

__all__ = [
    'PageInfo',
    'ConnectionValue',
    'EdgeValue',
    'get_connection_type',
    'connection_field',
    'forward_relation_field_sources',
]

_ARG_DESC_CONDITION = "Only return values whose fields equal the given ones."
_ARG_DESC_FIRST = "Return at most this many values from the start of the window."
_ARG_DESC_LAST = "Return at most this many values from the end of the window."
_ARG_DESC_BEFORE = "Only return values before this cursor."
_ARG_DESC_AFTER = "Only return values after this cursor."
_ARG_DESC_OFFSET = "Skip this many values after the `after` cursor (or the start)."


@strawberry.type(name='PageInfo', description="Position of a page within a connection.")
class PageInfo:
    has_next_page: bool = strawberry.field(name='hasNextPage')
    has_previous_page: bool = strawberry.field(name='hasPreviousPage')
    start_cursor: Optional[str] = strawberry.field(name='startCursor')
    end_cursor: Optional[str] = strawberry.field(name='endCursor')


@dataclass
class EdgeValue:
    cursor: str
    node: Any


@dataclass
class ConnectionValue:
    """One page read from a paginator, plus what is needed to count the whole set."""

    paginator: Paginator
    context: Any
    condition: Condition
    page: Page

    def edges(self) -> List[EdgeValue]:
        name = self.paginator.name
        return [EdgeValue(cursor=serialize_cursor(name, pv.cursor), node=pv.value) for pv in self.page.values]

    def page_info(self) -> PageInfo:
        edges = self.edges()
        return PageInfo(
            has_next_page=bool(self.page.has_next_page),
            has_previous_page=bool(self.page.has_previous_page),
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )


def _edge_cursor(self):
    return self.cursor


def _edge_node(self):
    return self.node


def _connection_edges(self):
    return self.edges()


def _connection_nodes(self):
    return [pv.value for pv in self.page.values]


def _connection_page_info(self):
    return self.page_info()


async def _connection_total_count(self):
    return int(await maybe_await(self.paginator.count(self.context, self.condition)))


def get_connection_type(context: 'BuildContext', collection: Collection) -> type:
    """``<Type>Connection`` for ``collection`` (with its ``<Type>Edge``), memoised per collection."""
    cached = context.connection_types.get(collection.name)
    if cached is not None:
        return cached
    from .collection_type import get_collection_output_type
    registry = context.registry
    node_type = get_collection_output_type(context, collection)
    type_name = registry.name_of(node_type)
    edge_name = f"{type_name}Edge"
    connection_name = f"{type_name}Connection"

    EdgePlain = type(edge_name, (), {})

    def _edge_fields():
        return {
            'cursor': FieldConfig(type=str, resolve=_edge_cursor, description="Opaque position of this edge."),
            'node': FieldConfig(type=Optional[node_type], resolve=_edge_node),
        }
    registry.define(edge_name, EdgePlain, _edge_fields, description=f"A {type_name} with its cursor.")

    ConnectionPlain = type(connection_name, (), {})

    def _connection_fields():
        return {
            'edges': FieldConfig(type=List[EdgePlain], resolve=_connection_edges),
            'nodes': FieldConfig(type=List[Optional[node_type]], resolve=_connection_nodes),
            'pageInfo': FieldConfig(type=PageInfo, resolve=_connection_page_info),
            'totalCount': FieldConfig(
                type=int,
                resolve=_connection_total_count,
                description="Number of values matching the condition, ignoring the page window.",
            ),
        }
    registry.define(connection_name, ConnectionPlain, _connection_fields, description=f"A page of {type_name} values.")
    context.connection_types[collection.name] = ConnectionPlain
    return ConnectionPlain


def _decode_cursor(paginator: Paginator, cursor: Optional[str]) -> Any:
    if cursor is None:
        return None
    return deserialize_cursor(paginator.name, cursor)


def connection_field(
    context: 'BuildContext',
    collection: Collection,
    base_condition: Optional[Callable[[Any], Condition]] = None,
    description: Optional[str] = None,
) -> FieldConfig:
    """Field returning a connection over ``collection``.

    ``base_condition(parent)`` scopes the read to the parent value; the
    client's ``condition`` argument is and-ed with it.
    """
    paginator = collection.paginator
    if paginator is None:
        raise ValueError(f"Collection '{collection.name}' has no paginator")
    connection_type = get_connection_type(context, collection)
    condition_type = get_condition_type(context, collection.type)
    from_input = condition_type.from_input

    async def _impl(self, info, condition, first, last, before, after, offset):
        config = PageConfig(
            first=first,
            last=last,
            before=_decode_cursor(paginator, before),
            after=_decode_cursor(paginator, after),
            offset=offset,
        )
        check_page_config(config)
        scope = base_condition(self) if base_condition is not None else TRUE
        cond = and_(scope, from_input(condition))
        page = await maybe_await(paginator.read_page(info.context, cond, config))
        return ConnectionValue(paginator=paginator, context=info.context, condition=cond, page=page)

    anns = {'info': StrawberryInfo}
    if condition_type.annotation is not None:
        async def _resolver(self, info, condition=None, first=None, last=None, before=None, after=None, offset=None):  # noqa: D401
            return await _impl(self, info, condition, first, last, before, after, offset)
        anns['condition'] = Annotated[
            Optional[condition_type.annotation], strawberry.argument(description=_ARG_DESC_CONDITION)
        ]
    else:
        async def _resolver(self, info, first=None, last=None, before=None, after=None, offset=None):  # noqa: D401
            return await _impl(self, info, None, first, last, before, after, offset)
    anns.update(
        first=Annotated[Optional[int], strawberry.argument(description=_ARG_DESC_FIRST)],
        last=Annotated[Optional[int], strawberry.argument(description=_ARG_DESC_LAST)],
        before=Annotated[Optional[str], strawberry.argument(description=_ARG_DESC_BEFORE)],
        after=Annotated[Optional[str], strawberry.argument(description=_ARG_DESC_AFTER)],
        offset=Annotated[Optional[int], strawberry.argument(description=_ARG_DESC_OFFSET)],
    )
    annotate(_resolver, **anns)
    return FieldConfig(type=connection_type, resolve=_resolver, description=description)


def forward_relation_field_sources(context: 'BuildContext', collection: Collection) -> List[Tuple[str, List[FieldEntry]]]:
    """Connection fields for relations whose head is ``collection``, in registration order."""
    sources = []
    for relation in context.inventory.get_relations():
        if relation.head_collection is not collection:
            continue
        tail = relation.tail_collection
        if tail.paginator is None or relation.get_tail_condition_from_head_value is None:
            _logger.debug(
                "collectionql: skipping forward field for relation %s on %s (no paginator or tail condition)",
                relation.name, collection.name,
            )
            continue
        name = format_field(f"{tail.name}-by-{relation.name}")
        config = connection_field(
            context,
            tail,
            base_condition=relation.get_tail_condition_from_head_value,
            description=f"Values of '{tail.name}' related through '{relation.name}'.",
        )
        sources.append((f"relation '{relation.name}'", [(name, config)]))
    return sources
