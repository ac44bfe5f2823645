"""SQLAlchemy data-model provider, condition compiler and paginator."""
from __future__ import annotations

from .conditions import SQL_OPERATOR_REGISTRY, condition_to_sql, register_sql_operator
from .inventory import add_models, collection_from_model, relations_from_models, value_type_for_column
from .paginator import SQLAlchemyPaginator, context_lock, require_session

__all__ = [
    'SQL_OPERATOR_REGISTRY', 'condition_to_sql', 'register_sql_operator',
    'add_models', 'collection_from_model', 'relations_from_models', 'value_type_for_column',
    'SQLAlchemyPaginator', 'context_lock', 'require_session',
]
