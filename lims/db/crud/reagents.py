"""Reagent listing."""

from sqlalchemy.ext.asyncio import AsyncSession

from lims.db.pagination import Row, paginate
from lims.enums import ReagentStatus
from lims.pagination import (
    REAGENT_SORT_WHITELIST,
    CtePaginationBuilder,
    Filter,
    PaginationInfo,
    PaginationQuery,
    SortingInfo,
    apply_filters,
    escape_like_value,
)
from lims.pagination.whitelist import REAGENT_FIELDS

SEARCH_COLUMNS = ("name", "formula", "cas_number", "manufacturer")
SEARCH_CONDITION = "({})".format(
    " OR ".join(f"{column} LIKE ? ESCAPE '\\'" for column in SEARCH_COLUMNS)
)


def build_reagent_query(query: PaginationQuery) -> CtePaginationBuilder:
    """Builder for live reagents matching the request's filters.

    Recognized filters: ``status`` (unknown values are ignored),
    ``manufacturer`` (exact match) and ``has_stock`` (true keeps only
    reagents with a positive total quantity, false only empty ones).
    """
    builder = CtePaginationBuilder("reagents")
    builder.add_raw_condition("deleted_at IS NULL")

    filters: list[Filter] = []
    status = ReagentStatus.parse(query.filters.get("status"))
    if status is not None:
        filters.append(Filter.eq("status", status.value))

    manufacturer = query.filters.get("manufacturer")
    if manufacturer:
        filters.append(Filter.eq("manufacturer", manufacturer))

    has_stock = query.filters.get("has_stock")
    if has_stock is True:
        filters.append(Filter.gt("total_quantity", 0))
    elif has_stock is False:
        filters.append(Filter.lte("total_quantity", 0))

    apply_filters(builder, filters, REAGENT_FIELDS)

    search = query.get_search()
    if search:
        pattern = f"%{escape_like_value(search)}%"
        builder.add_search(SEARCH_CONDITION, [pattern] * len(SEARCH_COLUMNS))

    return builder


async def get_reagent_list(
    db: AsyncSession,
    query: PaginationQuery,
) -> tuple[list[Row], PaginationInfo, SortingInfo]:
    """Get one page of reagents."""
    builder = build_reagent_query(query)
    return await paginate(db, builder, query, REAGENT_SORT_WHITELIST)
