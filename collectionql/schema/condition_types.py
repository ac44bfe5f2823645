"""Generated ``<Type>Condition`` input types and their conversion to conditions."""
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

import strawberry
from strawberry import UNSET

from ..core.conditions import TRUE, Condition, and_, field_equals
from ..core.naming import format_field, format_type, python_name
from ..errors import SchemaConfigurationError
from ..interface import EnumType, Field, NullableType, ObjectType, ScalarType
from .output_types import get_enum_type

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..registry import BuildContext

_logger = logging.getLogger("collectionql")

__all__ = ['ConditionType', 'get_condition_type']


@dataclass
class ConditionType:
    """``annotation`` is ``None`` when no field of the type can be filtered on."""

    annotation: Optional[type]
    from_input: Callable[[Any], Condition]


def _operand_annotation(context: 'BuildContext', value_type: Any) -> Any:
    if isinstance(value_type, NullableType):
        value_type = value_type.non_null_type
    if isinstance(value_type, ScalarType):
        return value_type.python_type
    if isinstance(value_type, EnumType):
        return get_enum_type(context, value_type)
    return None


def _raw_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _build_condition_type(context: 'BuildContext', object_type: ObjectType) -> ConditionType:
    type_name = f"{format_type(object_type.name)}Condition"
    by_attr: Dict[str, Field] = {}
    by_name: Dict[str, Field] = {}
    anns: Dict[str, Any] = {}
    InPlain = type(type_name, (), {})
    for f in object_type.fields.values():
        base = _operand_annotation(context, f.type)
        if base is None:
            _logger.debug("collectionql: %s.%s cannot be used in conditions", object_type.name, f.name)
            continue
        gql_name = format_field(f.name)
        attr = python_name(gql_name)
        if attr in by_attr:
            raise SchemaConfigurationError(
                f"Fields '{by_attr[attr].name}' and '{f.name}' of '{object_type.name}' map to the same condition field"
            )
        by_attr[attr] = f
        by_name[gql_name] = f
        by_name.setdefault(f.name, f)
        anns[attr] = Optional[base]
        if f.description:
            setattr(InPlain, attr, strawberry.field(default=UNSET, name=gql_name, description=str(f.description)))  # type: ignore[arg-type]
        else:
            setattr(InPlain, attr, strawberry.field(default=UNSET, name=gql_name))  # type: ignore[arg-type]

    def from_input(payload: Any) -> Condition:
        if payload is None or payload is UNSET:
            return TRUE
        parts = []
        if isinstance(payload, Mapping):
            for key, value in payload.items():
                f = by_name.get(key)
                if f is None:
                    raise ValueError(f"Unknown condition field: {key}")
                if value is UNSET:
                    continue
                parts.append(field_equals(f.name, _raw_value(value)))
        else:
            for attr, f in by_attr.items():
                value = getattr(payload, attr, UNSET)
                if value is UNSET:
                    continue
                parts.append(field_equals(f.name, _raw_value(value)))
        return and_(*parts)

    if not anns:
        return ConditionType(annotation=None, from_input=from_input)
    setattr(InPlain, '__annotations__', anns)
    description = f"Equality conditions on the fields of {format_type(object_type.name)}; all given fields must match."
    annotation = strawberry.input(InPlain, name=type_name, description=description)
    return ConditionType(annotation=annotation, from_input=from_input)


def get_condition_type(context: 'BuildContext', object_type: ObjectType) -> ConditionType:
    cached = context.condition_types.get(object_type)
    if cached is None:
        cached = _build_condition_type(context, object_type)
        context.condition_types[object_type] = cached
    return cached
