import pytest

from collectionql.adapters import MemoryPaginator
from collectionql.core.conditions import TRUE, field_equals
from collectionql.core.pagination import page_window
from collectionql.errors import DecodeError
from collectionql.interface import INTEGER, Field, ObjectType, PageConfig

ROWS = [{'n': i, 'even': i % 2 == 0} for i in range(10)]
ROW_TYPE = ObjectType('row', [Field('n', INTEGER), Field('even', INTEGER)])


def _paginator():
    return MemoryPaginator('rows', ROW_TYPE, ROWS)


def test_page_window_bounds():
    assert page_window(PageConfig()) == (0, None)
    assert page_window(PageConfig(first=3)) == (0, 3)
    assert page_window(PageConfig(after=2, first=3)) == (3, 6)
    assert page_window(PageConfig(offset=4, first=2)) == (4, 6)
    assert page_window(PageConfig(after=1, offset=2)) == (4, None)
    assert page_window(PageConfig(before=5, last=2)) == (3, 5)
    assert page_window(PageConfig(last=3), total=10) == (7, 10)
    assert page_window(PageConfig(first=5, last=2)) == (3, 5)
    assert page_window(PageConfig(after=5, before=3)) == (6, 6)


def test_page_window_rejects_negative_and_bad_cursors():
    for cfg in (PageConfig(first=-1), PageConfig(last=-1), PageConfig(offset=-2)):
        with pytest.raises(ValueError):
            page_window(cfg)
    with pytest.raises(DecodeError):
        page_window(PageConfig(after='x'))
    with pytest.raises(ValueError):
        page_window(PageConfig(last=2))


async def test_memory_read_page_first_and_after():
    p = _paginator()
    page = await p.read_page(None, TRUE, PageConfig(first=3))
    assert [v.value['n'] for v in page.values] == [0, 1, 2]
    assert [v.cursor for v in page.values] == [0, 1, 2]
    assert page.has_next_page is True
    assert page.has_previous_page is False
    page2 = await p.read_page(None, TRUE, PageConfig(first=3, after=page.values[-1].cursor))
    assert [v.value['n'] for v in page2.values] == [3, 4, 5]
    assert page2.has_previous_page is True


async def test_memory_read_page_last_counts_filtered_rows():
    p = _paginator()
    cond = field_equals('even', True)
    assert p.count(None, cond) == 5
    page = await p.read_page(None, cond, PageConfig(last=2))
    assert [v.value['n'] for v in page.values] == [6, 8]
    assert page.has_next_page is False
    assert page.has_previous_page is True


async def test_memory_read_page_unbounded_and_empty():
    p = _paginator()
    page = await p.read_page(None, TRUE, PageConfig())
    assert len(page.values) == 10
    assert page.has_next_page is False
    empty = await p.read_page(None, TRUE, PageConfig(first=0))
    assert empty.values == []
    assert empty.has_next_page is False


async def test_memory_values_from_context_callable():
    p = MemoryPaginator('rows', ROW_TYPE, lambda ctx: ctx['rows'])
    page = await p.read_page({'rows': ROWS[:2]}, TRUE, PageConfig())
    assert [v.value['n'] for v in page.values] == [0, 1]


async def test_memory_unknown_condition_field():
    p = _paginator()
    with pytest.raises(ValueError, match='Unknown condition field'):
        await p.read_page(None, field_equals('missing', 1), PageConfig())
