from __future__ import annotations
import inspect
import uuid
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

__all__ = ['maybe_await', 'read_attribute', 'get_db_session', 'coerce_where_value']


async def maybe_await(value: Any) -> Any:
    """Await ``value`` when it is awaitable; collaborators may be sync or async."""
    if inspect.isawaitable(value):
        return await value
    return value


def read_attribute(value: Any, name: str) -> Any:
    """Default field accessor: mapping key first, then attribute."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


# --- Context helpers ---
def get_db_session(info_or_ctx: Any) -> Any | None:
    """Best-effort extraction of an AsyncSession-like object from context.

    Accepts either a Strawberry ``Info`` or a plain context object/dict. Tries
    common keys/attributes in order: ``db_session``, ``db``, ``session``,
    ``async_session``.

    Returns:
        The session object if found; otherwise ``None``.
    """
    if info_or_ctx is None:
        return None
    # If a Strawberry Info is passed, use its .context
    ctx = getattr(info_or_ctx, 'context', info_or_ctx)
    if ctx is None:
        return None
    candidates = ('db_session', 'db', 'session', 'async_session')
    if isinstance(ctx, Mapping):
        for k in candidates:
            v = ctx.get(k)
            if v is not None:
                return v
        return None
    for k in candidates:
        v = getattr(ctx, k, None)
        if v is not None:
            return v
    return None


def coerce_where_value(col, val):
    """Coerce a filter value to the Python type expected by a SQLAlchemy column."""
    from sqlalchemy import Enum as _SAEnum, Uuid as _Uuid
    from sqlalchemy.sql.sqltypes import Integer as _I, Float as _F, Boolean as _B, DateTime as _DT, Date as _D, Numeric as _N
    if val is None:
        return None
    if isinstance(val, (list, tuple)):
        return [coerce_where_value(col, v) for v in val]
    ctype = getattr(col, 'type', None)
    if ctype is None:
        return val
    if isinstance(ctype, _SAEnum):
        enum_cls = getattr(ctype, 'enum_class', None)
        if enum_cls is not None and not isinstance(val, enum_cls):
            try:
                return enum_cls(getattr(val, 'value', val))
            except ValueError:
                return val
        return val
    if isinstance(ctype, _Uuid):
        if isinstance(val, str):
            try:
                return uuid.UUID(val)
            except ValueError:
                return val
        return val
    if isinstance(ctype, _DT):
        if isinstance(val, str):
            s = val.replace('Z', '+00:00') if 'Z' in val else val
            try:
                dv = datetime.fromisoformat(s)
            except ValueError:
                return val
            if getattr(ctype, 'timezone', False) is False and dv.tzinfo is not None:
                dv = dv.replace(tzinfo=None)
            return dv
        return val
    if isinstance(ctype, _D):
        if isinstance(val, str):
            try:
                return date.fromisoformat(val)
            except ValueError:
                return val
        return val
    if isinstance(ctype, _I):
        try:
            return int(val) if isinstance(val, str) else val
        except ValueError:
            return val
    if isinstance(ctype, (_N, _F)):
        try:
            return float(val) if isinstance(val, str) else val
        except ValueError:
            return val
    if isinstance(ctype, _B):
        if isinstance(val, str):
            lv = val.strip().lower()
            if lv in ('true', 't', '1', 'yes', 'y'):
                return True
            if lv in ('false', 'f', '0', 'no', 'n'):
                return False
        return bool(val)
    if isinstance(val, Enum):
        return val.value
    return val
