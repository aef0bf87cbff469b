"""Batch listing."""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from lims.db.pagination import Row, paginate
from lims.enums import BatchStatus
from lims.pagination import (
    BATCH_SORT_WHITELIST,
    CtePaginationBuilder,
    Filter,
    FilterValue,
    PaginationInfo,
    PaginationQuery,
    SortingInfo,
    apply_filters,
    escape_like_value,
)
from lims.pagination.whitelist import BATCH_FIELDS

SEARCH_CONDITION = (
    "(batch_number LIKE ? ESCAPE '\\' OR cat_number LIKE ? ESCAPE '\\' OR supplier LIKE ? ESCAPE '\\')"
)


def _parse_statuses(raw: str | Iterable[str] | None) -> list[str]:
    """Known statuses from a list or comma-separated string, in request order."""
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    statuses: list[str] = []
    for item in raw:
        status = BatchStatus.parse(item)
        if status is not None and status.value not in statuses:
            statuses.append(status.value)
    return statuses


def _quantity_filter(low: float | None, high: float | None) -> Filter | None:
    if low is not None and high is not None:
        return Filter.between("quantity", FilterValue.float_range(float(low), float(high)))
    if low is not None:
        return Filter.gte("quantity", float(low))
    if high is not None:
        return Filter.lte("quantity", float(high))
    return None


def build_batch_query(query: PaginationQuery) -> CtePaginationBuilder:
    """Builder for live batches matching the request's filters.

    Recognized filters: ``reagent_id``, ``status`` (one or more; unknown
    values are dropped), ``supplier``, ``quantity_min`` and ``quantity_max``.
    """
    builder = CtePaginationBuilder("batches")
    builder.add_raw_condition("deleted_at IS NULL")

    filters: list[Filter] = []
    reagent_id = query.filters.get("reagent_id")
    if reagent_id:
        filters.append(Filter.eq("reagent_id", reagent_id))

    statuses = _parse_statuses(query.filters.get("status"))
    if statuses:
        filters.append(Filter.in_("status", statuses))

    supplier = query.filters.get("supplier")
    if supplier:
        filters.append(Filter.eq("supplier", supplier))

    quantity = _quantity_filter(
        query.filters.get("quantity_min"), query.filters.get("quantity_max")
    )
    if quantity is not None:
        filters.append(quantity)

    apply_filters(builder, filters, BATCH_FIELDS)

    search = query.get_search()
    if search:
        pattern = f"%{escape_like_value(search)}%"
        builder.add_search(SEARCH_CONDITION, [pattern, pattern, pattern])

    return builder


async def get_batch_list(
    db: AsyncSession,
    query: PaginationQuery,
) -> tuple[list[Row], PaginationInfo, SortingInfo]:
    """Get one page of batches."""
    builder = build_batch_query(query)
    return await paginate(db, builder, query, BATCH_SORT_WHITELIST)
