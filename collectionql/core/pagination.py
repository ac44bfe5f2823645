"""Offset-window pagination shared by the bundled paginators.

Cursors are zero-based positions in the filtered, ordered result. A page is
computed as a ``[start, end)`` window from ``after``/``before``/``offset``
and ``first``/``last``; one extra row is fetched to tell whether more rows
follow the window.
"""
from __future__ import annotations

from abc import abstractmethod
from typing import Any, List, Optional, Tuple

from ..errors import DecodeError
from ..interface import Page, PageConfig, PageValue, Paginator
from .conditions import Condition
from .utils import maybe_await

__all__ = ['OffsetPaginator', 'page_window', 'check_page_config']


def _position(cursor: Any, what: str) -> Optional[int]:
    if cursor is None:
        return None
    if isinstance(cursor, bool) or not isinstance(cursor, int) or cursor < 0:
        raise DecodeError(f"Invalid {what} cursor: {cursor!r}")
    return cursor


def check_page_config(config: PageConfig) -> None:
    for name in ('first', 'last', 'offset'):
        v = getattr(config, name)
        if v is not None and v < 0:
            raise ValueError(f"'{name}' must be a non-negative integer")


def page_window(config: PageConfig, total: Optional[int] = None) -> Tuple[int, Optional[int]]:
    """Return ``(start, end)`` for ``config``; ``end`` is exclusive or ``None`` for open.

    ``total`` is required only when ``last`` is set without ``first`` or ``before``.
    """
    check_page_config(config)
    after = _position(config.after, 'after')
    before = _position(config.before, 'before')
    start = 0 if after is None else after + 1
    if config.offset:
        start += config.offset
    end = before
    if config.first is not None:
        end = start + config.first if end is None else min(end, start + config.first)
    if config.last is not None:
        if end is None:
            if total is None:
                raise ValueError("'last' without an upper bound requires the total count")
            end = total
        start = max(start, end - config.last)
    if end is not None and end < start:
        end = start
    return start, end


class OffsetPaginator(Paginator):
    """Paginator over an ordered source addressed by position.

    Subclasses implement :meth:`count` and :meth:`fetch`.
    """

    @abstractmethod
    def fetch(self, context: Any, condition: Condition, offset: int, limit: Optional[int]) -> Any:
        """Return up to ``limit`` values starting at ``offset`` (sync or async)."""
        raise NotImplementedError

    async def read_page(self, context: Any, condition: Condition, config: PageConfig) -> Page:
        total = None
        if config.last is not None and config.first is None and config.before is None:
            total = await maybe_await(self.count(context, condition))
        start, end = page_window(config, total)
        limit = None if end is None else end - start
        if limit == 0:
            return Page(values=[], has_next_page=False, has_previous_page=start > 0)
        rows: List[Any] = list(await maybe_await(
            self.fetch(context, condition, start, None if limit is None else limit + 1)
        ))
        has_next = limit is not None and len(rows) > limit
        if has_next:
            rows = rows[:limit]
        values = [PageValue(value=row, cursor=start + i) for i, row in enumerate(rows)]
        return Page(values=values, has_next_page=has_next, has_previous_page=start > 0)
