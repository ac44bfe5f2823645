"""Error taxonomy for CollectionQL.

Configuration errors are raised while the schema is being built and are never
deferred to query time. Decode errors are raised by resolvers and reach the
caller as regular GraphQL errors.
"""
from __future__ import annotations

__all__ = [
    'CollectionQLError',
    'SchemaConfigurationError',
    'FieldNameCollisionError',
    'DecodeError',
]


class CollectionQLError(Exception):
    """Base class for every error raised by CollectionQL."""


class SchemaConfigurationError(CollectionQLError, ValueError):
    """The data model cannot be turned into a valid schema."""


class FieldNameCollisionError(SchemaConfigurationError):
    """Two field sources produced the same field name on one type."""

    def __init__(self, type_name: str, field_name: str, first_source: str, second_source: str):
        self.type_name = type_name
        self.field_name = field_name
        self.first_source = first_source
        self.second_source = second_source
        super().__init__(
            f"Field '{field_name}' on type '{type_name}' is defined by both "
            f"{first_source} and {second_source}"
        )


class DecodeError(CollectionQLError, ValueError):
    """A global identifier or cursor could not be decoded."""
