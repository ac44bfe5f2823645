from __future__ import annotations
import asyncio
import logging
from typing import Any, List, Optional

from sqlalchemy import func, inspect as sa_inspect, select

from ..core.conditions import TRUE, Condition
from ..core.pagination import OffsetPaginator
from ..core.utils import get_db_session
from .conditions import condition_to_sql

_logger = logging.getLogger("collectionql")

__all__ = ['SQLAlchemyPaginator', 'require_session', 'context_lock']

_LOCK_KEY = '_collectionql_db_lock'


def require_session(context: Any) -> Any:
    session = get_db_session(context)
    if session is None:
        raise RuntimeError("No database session in GraphQL context (expected 'db_session', 'db', 'session' or 'async_session')")
    return session


def context_lock(context: Any) -> asyncio.Lock:
    """Per-request lock stored on the GraphQL context; sibling resolvers share one AsyncSession."""
    if isinstance(context, dict):
        lock = context.get(_LOCK_KEY)
        if lock is None:
            lock = context[_LOCK_KEY] = asyncio.Lock()
        return lock
    lock = getattr(context, _LOCK_KEY, None)
    if lock is None:
        lock = asyncio.Lock()
        try:
            setattr(context, _LOCK_KEY, lock)
        except AttributeError:
            _logger.debug("collectionql: context %r does not accept attributes; DB access is not serialized", type(context))
    return lock


class SQLAlchemyPaginator(OffsetPaginator):
    """Offset paginator over a mapped class, ordered by primary key.

    Reads use the ``AsyncSession`` found in the GraphQL context.
    """

    def __init__(self, model: Any, name: Optional[str] = None):
        mapper = sa_inspect(model)
        self.model = model
        self.name = name or mapper.local_table.name
        self._order_by = list(mapper.primary_key)

    def _apply_where(self, stmt: Any, condition: Condition) -> Any:
        if condition == TRUE:
            return stmt
        return stmt.where(condition_to_sql(condition, self.model))

    async def count(self, context: Any, condition: Condition) -> int:
        session = require_session(context)
        stmt = self._apply_where(select(func.count()).select_from(self.model), condition)
        async with context_lock(context):
            return int((await session.execute(stmt)).scalar_one())

    async def fetch(self, context: Any, condition: Condition, offset: int, limit: Optional[int]) -> List[Any]:
        session = require_session(context)
        stmt = self._apply_where(select(self.model), condition).order_by(*self._order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        _logger.debug("collectionql: %s fetch offset=%s limit=%s", self.name, offset, limit)
        async with context_lock(context):
            return list((await session.execute(stmt)).scalars().all())
