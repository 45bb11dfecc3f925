# store/listing.py
"""
Filter / sort / page state shared by the back-office list screens.

Changing filters sends the user back to page 1; changing only the page or the
sort keeps the filters.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional
from urllib.parse import urlencode

SORT_ORDERS = ('asc', 'desc')


def _clean(values):
    return {k: v for k, v in values.items() if v not in (None, '')}


def _positive_int(value, default):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class ListQuery:
    filters: Dict[str, str] = field(default_factory=dict)
    sort_by: Optional[str] = None
    sort_order: str = 'desc'
    page: int = 1
    limit: int = 10

    def apply_filters(self, **filters):
        return replace(self, filters=_clean(filters), page=1)

    def with_page(self, page):
        return replace(self, page=_positive_int(page, 1))

    def with_sort(self, sort_by, sort_order=None):
        order = sort_order if sort_order in SORT_ORDERS else self.sort_order
        return replace(self, sort_by=sort_by or self.sort_by, sort_order=order)

    def params(self):
        """Query parameters for the API (camelCase keys, blanks dropped)."""
        params = dict(self.filters)
        params.update(page=self.page, limit=self.limit)
        if self.sort_by:
            params.update(sortBy=self.sort_by, sortOrder=self.sort_order)
        return _clean(params)

    def querystring(self, **overrides):
        values = dict(self.filters)
        values.update(page=self.page, limit=self.limit,
                      sort_by=self.sort_by, sort_order=self.sort_order)
        values.update(overrides)
        return urlencode(_clean(values))

    @classmethod
    def from_request(cls, request, filters=(), sort_fields=(), default_sort=None, limit=10):
        data = request.GET
        sort_by = data.get('sort_by')
        if sort_by not in sort_fields:
            sort_by = default_sort
        sort_order = data.get('sort_order')
        return cls(
            filters=_clean({name: data.get(name, '').strip() for name in filters}),
            sort_by=sort_by,
            sort_order=sort_order if sort_order in SORT_ORDERS else 'desc',
            page=_positive_int(data.get('page'), 1),
            limit=_positive_int(data.get('limit'), limit),
        )
