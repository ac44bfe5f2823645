"""Compile condition values into SQLAlchemy boolean expressions."""
from __future__ import annotations
from typing import Any, Callable, Dict

from sqlalchemy import and_ as sa_and, false, func, inspect as sa_inspect, not_ as sa_not, or_ as sa_or, true

from ..core.conditions import AndCondition, Condition, ConstantCondition, FieldCondition, NotCondition, OrCondition
from ..core.utils import coerce_where_value

__all__ = ['SQL_OPERATOR_REGISTRY', 'register_sql_operator', 'condition_to_sql']

# Global operator registry (extensible)
SQL_OPERATOR_REGISTRY: Dict[str, Callable[[Any, Any], Any]] = {
    'eq': lambda col, v: col.is_(None) if v is None else col == v,
    'ne': lambda col, v: col.is_not(None) if v is None else col != v,
    'lt': lambda col, v: col < v,
    'lte': lambda col, v: col <= v,
    'gt': lambda col, v: col > v,
    'gte': lambda col, v: col >= v,
    'like': lambda col, v: col.like(v),
    'ilike': lambda col, v: getattr(col, 'ilike', lambda x: func.lower(col).like(func.lower(x)))(v),
    'in': lambda col, v: col.in_(v if isinstance(v, (list, tuple, set)) else [v]),
    'not_in': lambda col, v: ~col.in_(v if isinstance(v, (list, tuple, set)) else [v]),
    'between': lambda col, v: col.between(v[0], v[1]) if isinstance(v, (list, tuple)) and len(v) >= 2 else false(),
    'contains': lambda col, v: col.contains(v),
    'starts_with': lambda col, v: col.like(f"{v}%"),
    'ends_with': lambda col, v: col.like(f"%{v}"),
}


def register_sql_operator(name: str, fn: Callable[[Any, Any], Any]):  # pragma: no cover - simple
    SQL_OPERATOR_REGISTRY[name] = fn


def _column(model: Any, name: str) -> Any:
    col = sa_inspect(model).columns.get(name)
    if col is None:
        raise ValueError(f"Unknown condition field for {getattr(model, '__name__', model)}: {name}")
    return col


def condition_to_sql(condition: Condition, model: Any) -> Any:
    """Translate ``condition`` into a WHERE clause over the columns of ``model``.

    Field names are mapped attribute keys of ``model``; values are coerced to
    the column's Python type first.
    """
    if isinstance(condition, ConstantCondition):
        return true() if condition.value else false()
    if isinstance(condition, AndCondition):
        return sa_and(*(condition_to_sql(c, model) for c in condition.conditions))
    if isinstance(condition, OrCondition):
        return sa_or(*(condition_to_sql(c, model) for c in condition.conditions))
    if isinstance(condition, NotCondition):
        return sa_not(condition_to_sql(condition.condition, model))
    if isinstance(condition, FieldCondition):
        fn = SQL_OPERATOR_REGISTRY.get(condition.op)
        if fn is None:
            raise ValueError(f"Unknown condition operator: {condition.op}")
        col = _column(model, condition.name)
        return fn(col, coerce_where_value(col, condition.value))
    raise TypeError(f"Unsupported condition: {condition!r}")
