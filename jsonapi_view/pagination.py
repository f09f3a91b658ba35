# JSON:API pagination (https://jsonapi.org/format/#fetching-pagination)
#
# The pagination information is supplied by the caller as the "_pagination" view variable:
# {
#     "self": "/countries?page=2",
#     "first": "/countries?page=1",
#     "last": "/countries?page=3",
#     "prev": "/countries?page=1",
#     "next": "/countries?page=3",
#     "record_count": 28,
#     "page_count": 3,
#     "page_limit": 10
# }
# The urls end up in the top-level "links", the counters in the top-level "meta"
#
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit
import pydantic
import sqlalchemy.orm.collections
import jsonapi_view
from .config import get_config
from .errors import ValidationError
from .jsonapi_primitives import PaginationInfo

LINK_NAMES = ("self", "first", "last", "prev", "next")
META_NAMES = ("record_count", "page_count", "page_limit")


def to_pagination_info(pagination: Union[None, PaginationInfo, Mapping[str, Any]]) -> Optional[PaginationInfo]:
    """
    :param pagination: pagination mapping
    :return: PaginationInfo or None
    """
    if pagination is None or isinstance(pagination, PaginationInfo):
        return pagination
    try:
        return PaginationInfo.model_validate(dict(pagination))
    except (pydantic.ValidationError, TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid pagination information: {exc}")


def get_pagination_links(pagination: Union[PaginationInfo, Mapping[str, Any]]) -> Dict[str, str]:
    """
    :param pagination: pagination info
    :return: the self/first/last/prev/next links, directions without a url are skipped
    """
    info = to_pagination_info(pagination)
    values = info.model_dump(by_alias=True)
    return {name: values[name] for name in LINK_NAMES if values.get(name)}


def get_pagination_meta(pagination: Union[PaginationInfo, Mapping[str, Any]]) -> Dict[str, Optional[int]]:
    """
    :param pagination: pagination info
    :return: the record_count, page_count and page_limit counters
    """
    info = to_pagination_info(pagination)
    return {name: getattr(info, name) for name in META_NAMES}


def _page_url(url: str, page: int, limit: int) -> str:
    """
    :return: `url` with the page and limit query arguments replaced
    """
    scheme, netloc, path, query, fragment = urlsplit(url)
    ignore_args = "page", "limit"
    args = [(k, v) for k, v in parse_qsl(query, keep_blank_values=True) if k not in ignore_args]
    args += [("page", page), ("limit", limit)]
    return urlunsplit((scheme, netloc, path, urlencode(args), fragment))


def paginate(object_query: Any, url: str, page: Any = 1, limit: Any = None) -> Tuple[List[Any], PaginationInfo]:
    """
    Fetch a page of records and create the corresponding pagination information

    :param object_query: SQLAlchemy query object or list of records
    :param url: url of the collection, the page and limit query arguments are added to it
    :param page: requested page number (starting at 1)
    :param limit: number of records per page, defaults to DEFAULT_PAGE_LIMIT
    :return: records, pagination info
    """
    try:
        page = int(page)
        limit = int(limit if limit is not None else get_config("DEFAULT_PAGE_LIMIT"))
    except (TypeError, ValueError):
        raise ValidationError("Pagination Value Error")

    if limit <= 0:
        limit = 1
    max_limit = int(get_config("MAX_PAGE_LIMIT"))
    if limit > max_limit:
        limit = max_limit

    if isinstance(object_query, (list, tuple, sqlalchemy.orm.collections.InstrumentedList)):
        count = len(object_query)
    else:
        count = object_query.count()

    page_count = max(1, math.ceil(count / limit))
    if page < 1:
        page = 1
    if page > page_count:
        page = page_count
    offset = (page - 1) * limit

    if isinstance(object_query, (list, tuple, sqlalchemy.orm.collections.InstrumentedList)):
        records = list(object_query[offset : offset + limit])
    else:
        try:
            records = object_query.offset(offset).limit(limit).all()
        except OverflowError:
            raise ValidationError("Pagination Overflow Error")

    links = {
        "self": _page_url(url, page, limit),
        "first": _page_url(url, 1, limit),
        "last": _page_url(url, page_count, limit),
        "prev": _page_url(url, page - 1, limit) if page > 1 else None,
        "next": _page_url(url, page + 1, limit) if page < page_count else None,
    }
    jsonapi_view.log.debug(f"Paginated {count} records: page {page}/{page_count}")
    info = PaginationInfo.model_validate(dict(links, record_count=count, page_count=page_count, page_limit=limit))
    return records, info
