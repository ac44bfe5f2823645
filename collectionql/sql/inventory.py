"""Build collections and relations from SQLAlchemy mapped classes.

Each mapped class becomes one collection named after its table, with the
class name as object type name, its column attributes as fields, an
``AsyncSession.get`` primary key reader and a :class:`SQLAlchemyPaginator`.
Many-to-one relationships between the given classes become relations named
after the relationship attribute.
"""
from __future__ import annotations
import inspect
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import ARRAY, JSON as SA_JSON, Boolean, Column, Date, DateTime, Enum as SAEnum, Integer, Numeric, String, TypeDecorator, Uuid, inspect as sa_inspect, select
from sqlalchemy.orm import RelationshipDirection

from ..core.conditions import and_, field_equals
from ..core.utils import coerce_where_value, read_attribute
from ..interface import (
    BOOLEAN, DATE, DATETIME, FLOAT, INTEGER, JSON, STRING, UUID,
    Collection, CollectionKey, EnumType, Field, Inventory, ListType, NullableType, ObjectType, Relation,
)
from .paginator import SQLAlchemyPaginator, context_lock, require_session

_logger = logging.getLogger("collectionql")

__all__ = ['value_type_for_column', 'collection_from_model', 'relations_from_models', 'add_models']


def _unwrap(sqlatype: Any) -> Any:
    while isinstance(sqlatype, TypeDecorator):
        inner = getattr(sqlatype, 'impl_instance', None) or getattr(sqlatype, 'impl', None)
        if inner is None or inner is sqlatype:
            break
        sqlatype = inner
    return sqlatype


def _enum_type(sqlatype: SAEnum, column: Any, enums: Dict[Any, EnumType]) -> EnumType:
    enum_cls = getattr(sqlatype, 'enum_class', None)
    cache_key = enum_cls or sqlatype.name or (column.table.name, column.name)
    cached = enums.get(cache_key)
    if cached is not None:
        return cached
    if enum_cls is not None:
        variants = [m.value for m in enum_cls]
        name = enum_cls.__name__
    else:
        variants = list(sqlatype.enums)
        name = sqlatype.name or f"{column.table.name}_{column.name}"
    out = EnumType(name=name, variants=variants)
    enums[cache_key] = out
    return out


def value_type_for_column(column: Any, enums: Optional[Dict[Any, EnumType]] = None) -> Any:
    """Value type of a column; nullable columns are wrapped in :class:`NullableType`."""
    enums = {} if enums is None else enums
    sqlatype = _unwrap(column.type)
    # Enum is a String subclass; check it first
    if isinstance(sqlatype, SAEnum):
        vt: Any = _enum_type(sqlatype, column, enums)
    elif isinstance(sqlatype, Integer):
        vt = INTEGER
    elif isinstance(sqlatype, Boolean):
        vt = BOOLEAN
    elif isinstance(sqlatype, DateTime):
        vt = DATETIME
    elif isinstance(sqlatype, Date):
        vt = DATE
    elif isinstance(sqlatype, Uuid):
        vt = UUID
    elif isinstance(sqlatype, String):
        vt = STRING
    elif isinstance(sqlatype, Numeric):
        vt = FLOAT
    elif isinstance(sqlatype, SA_JSON):
        vt = JSON
    elif isinstance(sqlatype, ARRAY):
        vt = ListType(value_type_for_column(_ItemColumn(column, sqlatype.item_type), enums))
    else:
        _logger.debug("collectionql: %s.%s has unmapped type %r, using String", column.table.name, column.name, sqlatype)
        vt = STRING
    if getattr(column, 'nullable', False):
        return NullableType(vt)
    return vt


class _ItemColumn:
    """Column stand-in for the item type of an ARRAY column."""

    nullable = False

    def __init__(self, column: Any, item_type: Any):
        self.table = column.table
        self.name = column.name
        self.type = item_type


def _description(column: Any) -> Optional[str]:
    return column.comment or (column.info or {}).get('description')


def _key_reader(model: Any, columns: List[Any]):
    mapper = sa_inspect(model)
    if [c.key for c in columns] == [c.key for c in mapper.primary_key]:
        async def read_by_pk(context: Any, key: Tuple[Any, ...]) -> Any:
            session = require_session(context)
            ident = tuple(coerce_where_value(c, v) for c, v in zip(columns, key))
            async with context_lock(context):
                return await session.get(model, ident[0] if len(ident) == 1 else ident)
        return read_by_pk

    async def read_by_columns(context: Any, key: Tuple[Any, ...]) -> Any:
        session = require_session(context)
        stmt = select(model).where(*(c == coerce_where_value(c, v) for c, v in zip(columns, key))).limit(1)
        async with context_lock(context):
            return (await session.execute(stmt)).scalars().first()
    return read_by_columns


def collection_from_model(
    model: Any,
    *,
    name: Optional[str] = None,
    type_name: Optional[str] = None,
    enums: Optional[Dict[Any, EnumType]] = None,
) -> Collection:
    mapper = sa_inspect(model)
    table = mapper.local_table
    enums = {} if enums is None else enums
    fields = [
        Field(attr_key, value_type_for_column(col, enums), description=_description(col))
        for attr_key, col in mapper.columns.items()
        # computed column_property expressions are not plain columns
        if isinstance(col, Column)
    ]
    doc = inspect.cleandoc(model.__doc__) if model.__doc__ else None
    object_type = ObjectType(type_name or model.__name__, fields, description=doc or table.comment)
    pk_columns = list(mapper.primary_key)
    primary_key = None
    if pk_columns:
        primary_key = CollectionKey(
            tuple(mapper.get_property_by_column(c).key for c in pk_columns),
            read=_key_reader(model, pk_columns),
        )
    return Collection(
        name=name or table.name,
        type=object_type,
        description=doc or table.comment,
        primary_key=primary_key,
        paginator=SQLAlchemyPaginator(model, name=name or table.name),
    )


def relations_from_models(collections: Dict[Any, Collection]) -> List[Relation]:
    """Relations for the many-to-one relationships between the mapped classes in ``collections``."""
    out: List[Relation] = []
    for model, tail in collections.items():
        tail_mapper = sa_inspect(model)
        for rel in tail_mapper.relationships:
            if rel.direction is not RelationshipDirection.MANYTOONE:
                continue
            head_model = rel.mapper.class_
            head = collections.get(head_model)
            if head is None:
                _logger.debug("collectionql: relationship %s.%s targets an unlisted model", model.__name__, rel.key)
                continue
            head_mapper = rel.mapper
            pairs = list(rel.local_remote_pairs)
            local_keys = tuple(tail_mapper.get_property_by_column(l).key for l, _ in pairs)
            remote_cols = [r for _, r in pairs]
            remote_keys = tuple(head_mapper.get_property_by_column(r).key for r in remote_cols)
            head_key = None
            if head.primary_key is None or remote_keys != head.primary_key.fields:
                head_key = CollectionKey(remote_keys, name=f"{rel.key}_key", read=_key_reader(head_model, remote_cols))
            out.append(Relation(
                name=rel.key,
                head_collection=head,
                tail_collection=tail,
                head_key=head_key,
                get_head_key_from_tail_value=_make_head_key_getter(local_keys),
                get_tail_condition_from_head_value=_make_tail_condition(local_keys, remote_keys),
            ))
    return out


def _make_head_key_getter(local_keys: Tuple[str, ...]):
    def get_head_key(tail_value: Any) -> Tuple[Any, ...]:
        return tuple(read_attribute(tail_value, k) for k in local_keys)
    return get_head_key


def _make_tail_condition(local_keys: Tuple[str, ...], remote_keys: Tuple[str, ...]):
    def get_tail_condition(head_value: Any):
        return and_(*(field_equals(lk, read_attribute(head_value, rk)) for lk, rk in zip(local_keys, remote_keys)))
    return get_tail_condition


def add_models(inventory: Inventory, *models: Any) -> List[Collection]:
    """Register one collection per mapped class, then the relations between them."""
    enums: Dict[Any, EnumType] = {}
    collections: Dict[Any, Collection] = {}
    for model in models:
        collections[model] = inventory.add_collection(collection_from_model(model, enums=enums))
    for relation in relations_from_models(collections):
        inventory.add_relation(relation)
    return list(collections.values())

