"""CollectionQL public API and lightweight lazy exports.

Importing the package does not import Strawberry type generation or the
SQLAlchemy adapter; both load on first attribute access.

Exposes:
- Data model: Inventory, Collection, CollectionKey, Relation, Field, ObjectType,
  EnumType, NullableType, ListType, ScalarType and the built-in scalars
- Schema entry point: CollectionSchema, BuildOptions, Hooks, FieldConfig
- Codecs: serialize, deserialize, deserialize_for
- Errors: CollectionQLError, SchemaConfigurationError, FieldNameCollisionError, DecodeError
"""
from __future__ import annotations

_INTERFACE_NAMES = {
    'ScalarType', 'EnumType', 'NullableType', 'ListType', 'ObjectType',
    'STRING', 'INTEGER', 'FLOAT', 'BOOLEAN', 'ID', 'JSON', 'DATETIME', 'DATE', 'UUID',
    'Field', 'CollectionKey', 'Collection', 'Relation',
    'PageConfig', 'PageValue', 'Page', 'Paginator', 'Inventory',
}
_REGISTRY_NAMES = {'CollectionSchema', 'BuildOptions', 'BuildContext', 'Hooks', 'StrawberryConfig'}
_ERROR_NAMES = {'CollectionQLError', 'SchemaConfigurationError', 'FieldNameCollisionError', 'DecodeError'}
_IDENTITY_NAMES = {'serialize', 'deserialize', 'deserialize_for'}


def __getattr__(name: str):  # PEP 562 lazy exports
    # Some IDEs/debuggers probe submodules via attribute access (pkg.registry).
    import importlib as _importlib
    if name in {'registry', 'interface', 'errors', 'schema', 'sql', 'adapters'}:
        return _importlib.import_module(__name__ + '.' + name)
    if name in _INTERFACE_NAMES:
        return getattr(_importlib.import_module(__name__ + '.interface'), name)
    if name in _REGISTRY_NAMES:
        return getattr(_importlib.import_module(__name__ + '.registry'), name)
    if name in _ERROR_NAMES:
        return getattr(_importlib.import_module(__name__ + '.errors'), name)
    if name in _IDENTITY_NAMES:
        return getattr(_importlib.import_module(__name__ + '.core.identity'), name)
    if name == 'FieldConfig':
        from .core.fields import FieldConfig as _FieldConfig
        return _FieldConfig
    raise AttributeError(name)


__all__ = sorted(_INTERFACE_NAMES | _REGISTRY_NAMES | _ERROR_NAMES | _IDENTITY_NAMES | {'FieldConfig'})
