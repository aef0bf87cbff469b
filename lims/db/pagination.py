"""Run a pagination builder against the database.

One listing request becomes two statements: a COUNT over the filters and
either a keyset (CTE) page or an offset page. Keyset mode is used only
when a cursor was supplied and the sort key is keyset-eligible; anything
else is served as an offset page.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from lims.config import get_settings
from lims.constants import DIRECTION_NEXT, TIMESTAMP_STORAGE_FORMAT
from lims.pagination.builder import CtePaginationBuilder
from lims.pagination.cursor import (
    datetime_to_micros,
    decode_cursor,
    decode_cursor_datetime,
    encode_cursor,
    encode_cursor_datetime,
    micros_to_datetime,
)
from lims.pagination.exceptions import InvalidCursorError
from lims.pagination.schemas import PaginationInfo, PaginationQuery, SortingInfo
from lims.pagination.sorting import CursorKind, SortWhitelist
from lims.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

Row = dict[str, Any]


async def _execute(db: AsyncSession, sql: str, params: Sequence[str]) -> CursorResult:
    """Execute builder output as-is; placeholders are the driver's own ``?``."""
    conn = await db.connection()
    return await conn.exec_driver_sql(sql, tuple(params))


def _timestamp_micros(value: datetime | str) -> int:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return datetime_to_micros(value)


def row_cursor(row: Row, column: str, kind: CursorKind) -> str:
    """Cursor pointing at ``row`` as a page boundary."""
    if kind is CursorKind.TIMESTAMP:
        return encode_cursor_datetime(_timestamp_micros(row[column]), row["id"])
    return encode_cursor(row[column], row["id"])


def decode_boundary(cursor: str, kind: CursorKind) -> tuple[float | str, str]:
    """Decode ``cursor`` into a bindable ``(sort value, id)`` boundary.

    Raises:
        InvalidCursorError: If the token does not decode for this sort kind
    """
    if kind is CursorKind.TIMESTAMP:
        decoded = decode_cursor_datetime(cursor)
        if decoded is None:
            raise InvalidCursorError(cursor)
        micros, row_id = decoded
        try:
            moment = micros_to_datetime(micros)
        except OverflowError as e:
            raise InvalidCursorError(cursor) from e
        return moment.strftime(TIMESTAMP_STORAGE_FORMAT), row_id

    decoded = decode_cursor(cursor)
    if decoded is None:
        raise InvalidCursorError(cursor)
    return decoded


async def paginate(
    db: AsyncSession,
    builder: CtePaginationBuilder,
    query: PaginationQuery,
    sort: SortWhitelist,
) -> tuple[list[Row], PaginationInfo, SortingInfo]:
    """Fetch one page for ``query`` from the rows ``builder`` selects.

    The builder must already carry the request's filter conditions; sort
    and limit are applied here.

    Returns:
        Tuple of (rows, pagination info, applied sorting)

    Raises:
        InvalidCursorError: If a keyset cursor is malformed
    """
    settings = get_settings()
    log = LogContext(logger, table=builder.table)

    sort_key = sort.resolve_key(query.sort_by)
    column = sort.validate(sort_key)
    builder.sort(column, query.sort_order)

    page, page_size, offset = query.normalize(settings.max_page_size, settings.default_page_size)
    builder.limit(page_size)

    sql, params = builder.build_count()
    total = (await _execute(db, sql, params)).scalar_one()
    sorting = SortingInfo(sort_by=sort_key, sort_order=builder.sort_order)

    kind = sort.cursor_kind(sort_key)
    if query.is_cursor_mode and kind is None:
        log.debug(f"Sort '{sort_key}' has no keyset support, ignoring cursor")

    if query.is_cursor_mode and kind is not None:
        try:
            value, row_id = decode_boundary(query.cursor, kind)
        except InvalidCursorError:
            log.warning(f"Rejected malformed cursor for sort '{sort_key}'")
            raise

        builder.keyset_after(value, row_id, query.is_desc, query.direction)
        sql, params = builder.build_cte(query.direction)
        result = await _execute(db, sql, params)
        keyset_page = builder.finalize(result.mappings().all(), query.direction)
        rows = [dict(r) for r in keyset_page.rows]

        # The cursor itself proves rows exist on the side it came from
        if query.direction == DIRECTION_NEXT:
            has_next, has_prev = keyset_page.has_more, True
        else:
            has_next, has_prev = True, keyset_page.has_more

        next_cursor = row_cursor(rows[-1], column, kind) if rows and has_next else None
        prev_cursor = row_cursor(rows[0], column, kind) if rows and has_prev else None
        log.debug(
            f"Keyset page: direction={query.direction} rows={len(rows)} total={total}"
        )
        info = PaginationInfo.from_cursor(
            total=total,
            per_page=page_size,
            has_next=has_next,
            has_prev=has_prev,
            next_cursor=next_cursor,
            prev_cursor=prev_cursor,
        )
        return rows, info, sorting

    if query.is_cursor_mode:
        page, offset = 1, 0

    sql, params = builder.build_simple(offset)
    result = await _execute(db, sql, params)
    rows = [dict(r) for r in result.mappings().all()]

    info = PaginationInfo.from_page(total, page, page_size)
    if kind is not None and rows and info.has_next:
        info.next_cursor = row_cursor(rows[-1], column, kind)
    log.debug(f"Offset page: page={page} rows={len(rows)} total={total}")
    return rows, info, sorting
