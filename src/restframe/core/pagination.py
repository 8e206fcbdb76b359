"""Pagination of ordered collections

`Pagination` is the result object. `PageNumberPagination` and
`LimitOffsetPagination` are the policies list views use to cut a page out of
a collection, driven by request query parameters.
"""

from math import ceil
from urllib import parse

from restframe.conf import get_setting
from restframe.exceptions import InvalidPageError


def _positive_int(value, strict=False, cutoff=None):
    """Cast a string to a positive integer, clipped at `cutoff` if given"""
    value = int(value)
    if value < 0 or (strict and value == 0):
        raise ValueError()
    if cutoff:
        return min(value, cutoff)
    return value


def replace_query_param(url, key, val):
    """Return `url` with the query parameter `key` set to `val`"""
    scheme, netloc, path, query, fragment = parse.urlsplit(str(url))
    query_dict = parse.parse_qs(query, keep_blank_values=True)
    query_dict[str(key)] = [str(val)]
    query = parse.urlencode(sorted(query_dict.items()), doseq=True)
    return parse.urlunsplit((scheme, netloc, path, query, fragment))


def remove_query_param(url, key):
    """Return `url` with the query parameter `key` dropped"""
    scheme, netloc, path, query, fragment = parse.urlsplit(str(url))
    query_dict = parse.parse_qs(query, keep_blank_values=True)
    query_dict.pop(key, None)
    query = parse.urlencode(sorted(query_dict.items()), doseq=True)
    return parse.urlunsplit((scheme, netloc, path, query, fragment))


def _page_count(total, per_page):
    """Pages needed for `total` items, zero when there is nothing to show"""
    if not per_page or not total:
        return 0
    return int(ceil(total / per_page))


class Pagination:
    """One page cut out of a collection.

    :param page: 1-based number of the page
    :param per_page: Page size
    :param total: Size of the whole collection
    :param items: What the page holds
    :param offset: Position of the first item in the collection, derived
        from `page` unless given

    Policies fill in `next_link` and `previous_link` when they know the
    request URL.
    """

    def __init__(self, page: int, per_page: int, total: int, items: list, offset: int = None):
        self.page = page
        self.per_page = per_page
        self.total = total
        self.items = items
        self.offset = offset if offset is not None else (page - 1) * per_page

        self.next_link = None
        self.previous_link = None

    @property
    def pages(self):
        return _page_count(self.total, self.per_page)

    @property
    def has_prev(self):
        return self.offset > 0

    @property
    def has_next(self):
        return self.total > self.offset + self.per_page

    @property
    def next_num(self):
        if not self.has_next:
            return None
        return self.page + 1

    @property
    def prev_num(self):
        if not self.has_prev:
            return None
        return self.page - 1

    @property
    def first(self):
        return next(iter(self.items), None)

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __repr__(self):
        return f"<Pagination page={self.page} per_page={self.per_page} total={self.total}>"


def paginate_all(items, per_page):
    """Split `items` into consecutive pages of at most `per_page` items"""
    if per_page < 1:
        raise ValueError("`per_page` must be a positive integer")

    items = list(items)
    total = len(items)
    for page in range(1, _page_count(total, per_page) + 1):
        offset = (page - 1) * per_page
        yield Pagination(page, per_page, total, items[offset : offset + per_page])


class BasePagination:
    """Base class for pagination policies"""

    def paginate(self, items, params, url=None) -> Pagination:  # pragma: no cover
        raise NotImplementedError("`paginate()` must be implemented.")

    def get_paginated_data(self, data, pagination, key="results") -> dict:  # pragma: no cover
        raise NotImplementedError("`get_paginated_data()` must be implemented.")


class PageNumberPagination(BasePagination):
    """Paginate by page number: `?page=4`, and optionally `?page=4&page_size=100`

    The page size defaults to the `PAGE_SIZE` setting. Per-request overrides
    through `page_size_query_param` are capped at `max_page_size`, which
    defaults to the `MAX_PAGE_SIZE` setting.
    """

    page_size = None
    max_page_size = None
    page_query_param = "page"
    page_size_query_param = None
    last_page_strings = ("last",)

    invalid_page_message = "Invalid page."

    def __init__(self, page_size=None, max_page_size=None, page_size_query_param=None):
        self.page_size = page_size or self.page_size or get_setting("PAGE_SIZE")
        self.max_page_size = max_page_size or self.max_page_size or get_setting("MAX_PAGE_SIZE")
        self.page_size_query_param = page_size_query_param or self.page_size_query_param

    def get_page_size(self, params):
        if self.page_size_query_param and self.page_size_query_param in params:
            try:
                return _positive_int(
                    params[self.page_size_query_param],
                    strict=True,
                    cutoff=self.max_page_size,
                )
            except (KeyError, ValueError, TypeError):
                pass

        return self.page_size

    def paginate(self, items, params, url=None):
        items = list(items)
        per_page = self.get_page_size(params)
        total = len(items)
        pages = max(_page_count(total, per_page), 1)

        raw_page = params.get(self.page_query_param, 1)
        if raw_page in self.last_page_strings:
            page = pages
        else:
            try:
                page = _positive_int(raw_page, strict=True)
            except (ValueError, TypeError):
                raise InvalidPageError(self.invalid_page_message)

        if page > pages:
            raise InvalidPageError(self.invalid_page_message)

        offset = (page - 1) * per_page
        pagination = Pagination(page, per_page, total, items[offset : offset + per_page])

        if url is not None:
            if pagination.has_next:
                pagination.next_link = replace_query_param(
                    url, self.page_query_param, pagination.next_num
                )
            if pagination.has_prev:
                if pagination.prev_num == 1:
                    pagination.previous_link = remove_query_param(url, self.page_query_param)
                else:
                    pagination.previous_link = replace_query_param(
                        url, self.page_query_param, pagination.prev_num
                    )

        return pagination

    def get_paginated_data(self, data, pagination, key="results"):
        return {
            key: data,
            "total": pagination.total,
            "page": pagination.page,
            "pages": pagination.pages,
            "next": pagination.next_link,
            "previous": pagination.previous_link,
        }


class LimitOffsetPagination(BasePagination):
    """Paginate by position: `?limit=100&offset=400`

    `limit` defaults to the `PAGE_SIZE` setting and is capped at `max_limit`,
    which defaults to the `MAX_PAGE_SIZE` setting.
    """

    default_limit = None
    max_limit = None
    limit_query_param = "limit"
    offset_query_param = "offset"

    def __init__(self, default_limit=None, max_limit=None):
        self.default_limit = default_limit or self.default_limit or get_setting("PAGE_SIZE")
        self.max_limit = max_limit or self.max_limit or get_setting("MAX_PAGE_SIZE")

    def get_limit(self, params):
        if self.limit_query_param in params:
            try:
                return _positive_int(
                    params[self.limit_query_param], strict=True, cutoff=self.max_limit
                )
            except (KeyError, ValueError, TypeError):
                pass

        return self.default_limit

    def get_offset(self, params):
        try:
            return _positive_int(params[self.offset_query_param])
        except (KeyError, ValueError, TypeError):
            return 0

    def paginate(self, items, params, url=None):
        items = list(items)
        limit = self.get_limit(params)
        offset = self.get_offset(params)
        total = len(items)

        pagination = Pagination(
            offset // limit + 1, limit, total, items[offset : offset + limit], offset=offset
        )

        if url is not None:
            if pagination.has_next:
                next_url = replace_query_param(url, self.limit_query_param, limit)
                pagination.next_link = replace_query_param(
                    next_url, self.offset_query_param, offset + limit
                )
            if pagination.has_prev:
                previous_url = replace_query_param(url, self.limit_query_param, limit)
                if offset - limit <= 0:
                    pagination.previous_link = remove_query_param(
                        previous_url, self.offset_query_param
                    )
                else:
                    pagination.previous_link = replace_query_param(
                        previous_url, self.offset_query_param, offset - limit
                    )

        return pagination

    def get_paginated_data(self, data, pagination, key="results"):
        return {
            key: data,
            "total": pagination.total,
            "limit": pagination.per_page,
            "offset": pagination.offset,
            "next": pagination.next_link,
            "previous": pagination.previous_link,
        }
