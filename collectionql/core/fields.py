from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from ..errors import FieldNameCollisionError

__all__ = ['FieldConfig', 'FieldEntry', 'merge_field_entries', 'annotate']


@dataclass
class FieldConfig:
    """Normalized description of one output field before it becomes a Strawberry field.

    Attributes:
        type: Strawberry-compatible annotation for the field value
            (e.g. ``str``, ``Optional[PersonType]``, ``PostConnection``).
        resolve: Resolver called as ``resolve(self, info, **arguments)`` where
            ``self`` is the parent value. Extra parameters (with annotations)
            become GraphQL arguments.
        description: Optional GraphQL field description.
    """

    type: Any
    resolve: Callable[..., Any]
    description: Optional[str] = None


FieldEntry = Tuple[str, FieldConfig]


def merge_field_entries(
    type_name: str,
    sources: Sequence[Tuple[str, Optional[Iterable[FieldEntry]]]],
) -> Dict[str, FieldConfig]:
    """Merge ``(source label, entries)`` groups into one ordered field map.

    Order is preserved across and within sources. A name produced twice raises
    :class:`FieldNameCollisionError` naming both sources.
    """
    out: Dict[str, FieldConfig] = {}
    origin: Dict[str, str] = {}
    for label, entries in sources:
        for name, config in entries or ():
            if name in out:
                raise FieldNameCollisionError(type_name, name, origin[name], label)
            out[name] = config
            origin[name] = label
    return out


def annotate(fn: Callable[..., Any], **annotations: Any) -> Callable[..., Any]:
    """Attach concrete (non-string) annotations to a generated resolver.

    Strawberry reads argument types from the resolver signature; generated
    types only exist at runtime so they cannot be written in the source.
    """
    fn.__annotations__ = dict(annotations)
    return fn
