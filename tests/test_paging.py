"""Tests for the paginator."""

import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from scouting.core.paging import (
    InvalidPageSize, ListPager, Paginator, page_number_from_query,
)


class CountingPager(ListPager):
    """ListPager that records every slice request."""

    def __init__(self, items):
        super().__init__(items)
        self.requests = []

    def slice(self, offset, limit):
        self.requests.append((offset, limit))
        return super().slice(offset, limit)


class TestPaginator:
    def test_page_count(self):
        assert Paginator(ListPager(range(5)), 2).page_count() == 3
        assert Paginator(ListPager(range(4)), 2).page_count() == 2
        assert Paginator(ListPager(range(1)), 50).page_count() == 1

    def test_pages(self):
        paginator = Paginator(ListPager(list(range(5))), 2)
        assert paginator.page(1).fetch() == [0, 1]
        assert paginator.page(2).fetch() == [2, 3]
        assert paginator.page(3).fetch() == [4]

    def test_last_page_slice_is_clipped(self):
        pager = CountingPager(list(range(5)))
        Paginator(pager, 2).page(3).fetch()
        assert pager.requests == [(4, 1)]

    def test_out_of_range(self):
        paginator = Paginator(ListPager(list(range(5))), 2)
        assert paginator.page(4) is None
        assert paginator.page(0) is None
        assert paginator.page(-1) is None

    def test_empty_source_has_one_empty_page(self):
        paginator = Paginator(ListPager([]), 10)
        assert paginator.page_count() == 1
        page = paginator.page(1)
        assert page.fetch() == []
        assert not page.has_next
        assert not page.has_previous
        assert paginator.page(2) is None

    def test_invalid_page_size(self):
        with pytest.raises(InvalidPageSize):
            Paginator(ListPager([1, 2]), 0)
        with pytest.raises(ValueError):
            Paginator(ListPager([1, 2]), -3)


class TestPage:
    def test_navigation(self):
        paginator = Paginator(ListPager(list(range(5))), 2)
        first, middle, last = paginator.page(1), paginator.page(2), paginator.page(3)

        assert first.has_next and not first.has_previous
        assert middle.has_next and middle.has_previous
        assert not last.has_next and last.has_previous
        assert middle.next_number == 3
        assert middle.previous_number == 1

    def test_pages_cover_source_once(self):
        items = list(range(23))
        paginator = Paginator(ListPager(items), 5)
        fetched = []
        for number in range(1, paginator.page_count() + 1):
            fetched.extend(paginator.page(number).fetch())
        assert fetched == items


class TestPageNumberFromQuery:
    def test_parses_numbers(self):
        assert page_number_from_query('3') == 3

    def test_defaults_to_first_page(self):
        assert page_number_from_query(None) == 1
        assert page_number_from_query('') == 1
        assert page_number_from_query('abc') == 1
