"""Split a countable, sliceable source into 1-indexed pages."""

from typing import Protocol, Sequence


class InvalidPageSize(ValueError):
    pass


class Pager(Protocol):
    """Something that can be paginated over."""

    def count(self) -> int: ...

    def slice(self, offset: int, limit: int) -> list: ...


class ListPager:
    """Pager over an in-memory sequence."""

    def __init__(self, items: Sequence):
        self.items = items

    def count(self) -> int:
        return len(self.items)

    def slice(self, offset: int, limit: int) -> list:
        return list(self.items[offset:offset + limit])


class Paginator:
    def __init__(self, pager: Pager, per_page: int):
        if per_page < 1:
            raise InvalidPageSize('there must be at least one result per page')
        self.pager = pager
        self.per_page = per_page
        self.count = pager.count()

    def page_count(self) -> int:
        """Number of pages; an empty source still has one, empty, page."""
        if self.count == 0:
            return 1
        return (self.count + self.per_page - 1) // self.per_page

    def page(self, number: int) -> 'Page | None':
        """Return the 1-based page ``number``, or None when out of range."""
        if number < 1 or number > self.page_count():
            return None
        return Page(self, number)


class Page:
    def __init__(self, paginator: Paginator, number: int):
        self.paginator = paginator
        self.number = number

    @property
    def has_next(self) -> bool:
        return self.number < self.paginator.page_count()

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def next_number(self) -> int:
        return self.number + 1

    @property
    def previous_number(self) -> int:
        return self.number - 1

    def fetch(self) -> list:
        """Fetch the items on this page."""
        per_page = self.paginator.per_page
        offset = (self.number - 1) * per_page
        limit = min(per_page, self.paginator.count - offset)
        if limit <= 0:
            return []
        return self.paginator.pager.slice(offset, limit)


def page_number_from_query(value) -> int:
    """Page number from a raw ``page`` query value, defaulting to 1."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 1
