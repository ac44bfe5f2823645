"""Map data-model value types to Strawberry annotations.

Results are memoised per value type in the build context so every reference
to the same enum or object type resolves to the same generated class.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

import strawberry

from ..core.fields import FieldConfig, FieldEntry, merge_field_entries
from ..core.naming import format_enum_value, format_field, format_type
from ..errors import SchemaConfigurationError
from ..interface import EnumType, Field, ListType, NullableType, ObjectType, ScalarType

try:  # Provide StrawberryInfo for type annotations
    from strawberry.types import Info as StrawberryInfo  # type: ignore
except ImportError:  # pragma: no cover
    from strawberry.types.info import Info as StrawberryInfo  # type: ignore

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..registry import BuildContext

_logger = logging.getLogger("collectionql")

__all__ = ['OutputType', 'get_output_type', 'get_enum_type', 'object_field_sources']


@dataclass
class OutputType:
    """Strawberry annotation plus the transform applied to raw field values."""

    annotation: Any
    to_output: Callable[[Any], Any]


def _identity(value: Any) -> Any:
    return value


def get_enum_type(context: 'BuildContext', enum_type: EnumType) -> Any:
    """Strawberry enum generated for ``enum_type`` (one per build context)."""
    return get_output_type(context, enum_type).annotation


def _enum_output(enum_type: EnumType) -> OutputType:
    members = {}
    for variant in enum_type.variants:
        member_name = format_enum_value(variant)
        if member_name in members:
            raise SchemaConfigurationError(
                f"Enum '{enum_type.name}' has variants that share the name '{member_name}'"
            )
        members[member_name] = variant
    if not members:
        raise SchemaConfigurationError(f"Enum '{enum_type.name}' has no variants")
    name = format_type(enum_type.name)
    py_enum = Enum(name, members)  # type: ignore[misc]
    if enum_type.description:
        st_enum = strawberry.enum(py_enum, name=name, description=str(enum_type.description))
    else:
        st_enum = strawberry.enum(py_enum, name=name)

    def to_output(value: Any) -> Any:
        if value is None or isinstance(value, st_enum):
            return value
        return st_enum(getattr(value, 'value', value))
    return OutputType(annotation=st_enum, to_output=to_output)


def _object_output(context: 'BuildContext', object_type: ObjectType) -> OutputType:
    from .collection_type import get_collection_output_type
    collection = context.collection_for_type(object_type)
    if collection is not None:
        return OutputType(annotation=get_collection_output_type(context, collection), to_output=_identity)
    name = format_type(object_type.name)
    shell = type(name, (), {})

    def _fields():
        return merge_field_entries(name, object_field_sources(context, object_type))
    context.registry.define(name, shell, _fields, description=object_type.description)
    return OutputType(annotation=shell, to_output=_identity)


def get_output_type(context: 'BuildContext', value_type: Any) -> OutputType:
    cached = context.output_types.get(value_type)
    if cached is not None:
        return cached
    if isinstance(value_type, ScalarType):
        out = OutputType(annotation=value_type.python_type, to_output=_identity)
    elif isinstance(value_type, EnumType):
        out = _enum_output(value_type)
    elif isinstance(value_type, NullableType):
        inner = get_output_type(context, value_type.non_null_type)
        inner_fn = inner.to_output

        def to_optional(value: Any) -> Any:
            return None if value is None else inner_fn(value)
        out = OutputType(annotation=Optional[inner.annotation], to_output=to_optional)
    elif isinstance(value_type, ListType):
        item = get_output_type(context, value_type.item_type)
        item_fn = item.to_output

        def to_list(value: Any) -> Any:
            return [item_fn(v) for v in value]
        out = OutputType(annotation=List[item.annotation], to_output=to_list)
    elif isinstance(value_type, ObjectType):
        out = _object_output(context, value_type)
    else:
        raise SchemaConfigurationError(f"Unsupported value type: {value_type!r}")
    context.output_types[value_type] = out
    return out


def _make_field_resolver(field: Field, to_output: Callable[[Any], Any]):
    def _resolver(self, info: StrawberryInfo):  # noqa: D401
        return to_output(field.get_value(self))
    return _resolver


def object_field_sources(context: 'BuildContext', object_type: ObjectType) -> List[Tuple[str, List[FieldEntry]]]:
    """One ``(label, [entry])`` source per field of ``object_type``, in order."""
    sources = []
    for f in object_type.fields.values():
        out = get_output_type(context, f.type)
        config = FieldConfig(type=out.annotation, resolve=_make_field_resolver(f, out.to_output), description=f.description)
        sources.append((f"field '{f.name}'", [(format_field(f.name), config)]))
    return sources
