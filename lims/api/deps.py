"""Shared dependencies for listing endpoints."""

from typing import Annotated

from fastapi import Query

from lims.constants import DEFAULT_SORT_ORDER, DIRECTION_NEXT
from lims.pagination import PaginationQuery


def pagination_query(
    page: Annotated[int | None, Query()] = None,
    page_size: Annotated[int | None, Query()] = None,
    cursor: Annotated[str | None, Query()] = None,
    direction: Annotated[str, Query()] = DIRECTION_NEXT,
    search: Annotated[str | None, Query()] = None,
    q: Annotated[str | None, Query()] = None,
    sort_by: Annotated[str | None, Query()] = None,
    sort_order: Annotated[str, Query()] = DEFAULT_SORT_ORDER,
) -> PaginationQuery:
    """Common pagination parameters.

    Out-of-range ``page`` and ``page_size`` are clamped rather than
    rejected, and an unknown ``sort_by`` falls back to the listing's
    default sort.
    """
    return PaginationQuery(
        page=page,
        page_size=page_size,
        cursor=cursor,
        direction=direction,
        search=search,
        q=q,
        sort_by=sort_by,
        sort_order=sort_order,
    )
