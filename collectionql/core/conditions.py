"""Condition values used to scope a collection read.

Conditions are plain immutable values. The schema layer only composes them;
paginators interpret them, either in memory through :func:`matches` or by
compiling them for a backing store (see ``collectionql.sql.conditions``).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

__all__ = [
    'Condition',
    'ConstantCondition',
    'NotCondition',
    'AndCondition',
    'OrCondition',
    'FieldCondition',
    'TRUE',
    'FALSE',
    'and_',
    'or_',
    'not_',
    'field_equals',
    'field_condition',
    'matches',
    'OPERATOR_REGISTRY',
    'register_operator',
]


def _like_to_regex(pattern: str, flags: int = 0) -> 're.Pattern[str]':
    parts = []
    for ch in str(pattern):
        if ch == '%':
            parts.append('.*')
        elif ch == '_':
            parts.append('.')
        else:
            parts.append(re.escape(ch))
    return re.compile('^' + ''.join(parts) + '$', flags | re.DOTALL)


def _like(v: Any, pattern: Any, flags: int = 0) -> bool:
    if v is None or pattern is None:
        return False
    return _like_to_regex(pattern, flags).match(str(v)) is not None


def _as_list(v: Any) -> list:
    return list(v) if isinstance(v, (list, tuple, set, frozenset)) else [v]


def _between(v: Any, bounds: Any) -> bool:
    if v is None or not isinstance(bounds, (list, tuple)) or len(bounds) < 2:
        return False
    return bounds[0] <= v <= bounds[1]


def _ordered(fn: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    # SQL semantics: comparisons against NULL are never true
    def _cmp(v: Any, arg: Any) -> bool:
        if v is None or arg is None:
            return False
        return fn(v, arg)
    return _cmp


# Global operator registry (extensible). Each entry evaluates `field_value <op> argument`.
OPERATOR_REGISTRY: Dict[str, Callable[[Any, Any], bool]] = {
    'eq': lambda v, arg: v == arg,
    'ne': lambda v, arg: v != arg,
    'lt': _ordered(lambda v, arg: v < arg),
    'lte': _ordered(lambda v, arg: v <= arg),
    'gt': _ordered(lambda v, arg: v > arg),
    'gte': _ordered(lambda v, arg: v >= arg),
    'like': lambda v, arg: _like(v, arg),
    'ilike': lambda v, arg: _like(v, arg, re.IGNORECASE),
    'in': lambda v, arg: v in _as_list(arg),
    'not_in': lambda v, arg: v not in _as_list(arg),
    'between': _between,
    'contains': lambda v, arg: v is not None and arg in v,
    'starts_with': lambda v, arg: v is not None and str(v).startswith(str(arg)),
    'ends_with': lambda v, arg: v is not None and str(v).endswith(str(arg)),
}


def register_operator(name: str, fn: Callable[[Any, Any], bool]):  # pragma: no cover - simple
    OPERATOR_REGISTRY[name] = fn


class Condition:
    """Marker base class for condition values."""

    __slots__ = ()


@dataclass(frozen=True)
class ConstantCondition(Condition):
    value: bool


@dataclass(frozen=True)
class NotCondition(Condition):
    condition: Condition


@dataclass(frozen=True)
class AndCondition(Condition):
    conditions: Tuple[Condition, ...]


@dataclass(frozen=True)
class OrCondition(Condition):
    conditions: Tuple[Condition, ...]


@dataclass(frozen=True)
class FieldCondition(Condition):
    """``<field name> <op> <value>`` on the raw (unformatted) field name."""

    name: str
    op: str
    value: Any = None


TRUE = ConstantCondition(True)
FALSE = ConstantCondition(False)


def and_(*conditions: Condition) -> Condition:
    """Conjunction. ``and_()`` is ``TRUE``; ``TRUE`` operands are dropped."""
    flat = []
    for c in conditions:
        if c is None or c == TRUE:
            continue
        if c == FALSE:
            return FALSE
        if isinstance(c, AndCondition):
            flat.extend(c.conditions)
        else:
            flat.append(c)
    if not flat:
        return TRUE
    if len(flat) == 1:
        return flat[0]
    return AndCondition(tuple(flat))


def or_(*conditions: Condition) -> Condition:
    """Disjunction. ``or_()`` is ``FALSE``; ``FALSE`` operands are dropped."""
    flat = []
    for c in conditions:
        if c is None or c == FALSE:
            continue
        if c == TRUE:
            return TRUE
        if isinstance(c, OrCondition):
            flat.extend(c.conditions)
        else:
            flat.append(c)
    if not flat:
        return FALSE
    if len(flat) == 1:
        return flat[0]
    return OrCondition(tuple(flat))


def not_(condition: Condition) -> Condition:
    if condition == TRUE:
        return FALSE
    if condition == FALSE:
        return TRUE
    if isinstance(condition, NotCondition):
        return condition.condition
    return NotCondition(condition)


def field_condition(name: str, op: str, value: Any) -> FieldCondition:
    if op not in OPERATOR_REGISTRY:
        raise ValueError(f"Unknown condition operator: {op}")
    return FieldCondition(name, op, value)


def field_equals(name: str, value: Any) -> FieldCondition:
    return FieldCondition(name, 'eq', value)


def matches(condition: Condition, value: Any, get_field: Callable[[Any, str], Any]) -> bool:
    """Evaluate ``condition`` against one value.

    ``get_field(value, name)`` reads a raw field from the value; it is called
    only for field conditions that are actually reached.
    """
    if isinstance(condition, ConstantCondition):
        return condition.value
    if isinstance(condition, AndCondition):
        return all(matches(c, value, get_field) for c in condition.conditions)
    if isinstance(condition, OrCondition):
        return any(matches(c, value, get_field) for c in condition.conditions)
    if isinstance(condition, NotCondition):
        return not matches(condition.condition, value, get_field)
    if isinstance(condition, FieldCondition):
        op_fn = OPERATOR_REGISTRY.get(condition.op)
        if op_fn is None:
            raise ValueError(f"Unknown condition operator: {condition.op}")
        return bool(op_fn(get_field(value, condition.name), condition.value))
    raise TypeError(f"Unsupported condition: {condition!r}")
