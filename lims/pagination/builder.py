"""SQL construction for hybrid offset/keyset listings.

The builder produces three statements from one set of filters:

``build_count``
    ``SELECT COUNT(*)`` with the filter parameters only.
``build_simple``
    Offset pagination, ``ORDER BY sort, id LIMIT ? OFFSET ?``.
``build_cte``
    Keyset pagination with a deferred join::

        WITH ids AS (
            SELECT id, total_quantity
            FROM reagents
            WHERE <filters> AND <keyset predicate>
            ORDER BY total_quantity DESC, id DESC
            LIMIT ?
        )
        SELECT r.*
        FROM reagents r
        INNER JOIN ids ON r.id = ids.id
        ORDER BY ids.total_quantity DESC, ids.id DESC

The inner query touches only ``(sort column, id)``, so wide rows are read
for at most ``limit + 1`` ids however deep the page is. The extra row tells
whether another page exists.

Filter parameters and keyset parameters are kept apart so the same filters
drive both the COUNT and the page query. SQL text and parameter list must be
executed together, in the order returned.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from lims.constants import (
    DEFAULT_PAGE_SIZE,
    DIRECTION_NEXT,
    DIRECTION_PREV,
    SORT_ASC,
    SORT_DESC,
)
from lims.pagination.values import FilterValue
from lims.pagination.whitelist import FieldConfig, validate_field_name

_TABLE_CONFIG = FieldConfig.for_table_names()
_COLUMN_CONFIG = FieldConfig.for_reports()


def normalize_order(order: str | None) -> str:
    """``ASC`` for any casing of "asc", ``DESC`` for everything else."""
    return SORT_ASC if (order or "").upper() == SORT_ASC else SORT_DESC


def normalize_direction(direction: str | None) -> str:
    return DIRECTION_PREV if direction == DIRECTION_PREV else DIRECTION_NEXT


def keyset_operator(is_desc: bool, direction: str) -> str:
    """Comparison that moves strictly away from the cursor boundary.

    ====== ========= ==
    order  direction op
    ====== ========= ==
    DESC   next      <
    DESC   prev      >
    ASC    next      >
    ASC    prev      <
    ====== ========= ==
    """
    forward = normalize_direction(direction) == DIRECTION_NEXT
    return "<" if forward == is_desc else ">"


def _count_placeholders(fragment: str) -> int:
    return fragment.count("?")


@dataclass
class KeysetPage:
    """Rows of one keyset page in display order."""

    rows: list[Any] = field(default_factory=list)
    has_more: bool = False


class CtePaginationBuilder:
    """Accumulates filters, sort and limit for one listing request.

    Not shared between requests. Every identifier passed in (table, select
    columns, sort column) is validated before it is put into SQL text.
    Values are only ever bound.
    """

    def __init__(self, table: str) -> None:
        validate_field_name(table, _TABLE_CONFIG)
        self._table = table
        self._select_columns: list[str] = ["*"]
        self._sort_column = "id"
        self._sort_order = SORT_DESC
        self._conditions: list[str] = []
        self._filter_params: list[str] = []
        self._keyset_params: list[str] = []
        self._keyset_operator: str | None = None
        self._limit = DEFAULT_PAGE_SIZE

    # Configuration
    def select(self, columns: str | Sequence[str]) -> "CtePaginationBuilder":
        """Set output columns, ``"*"`` or a list / comma-separated string."""
        if isinstance(columns, str):
            columns = [c.strip() for c in columns.split(",")]
        for column in columns:
            if column != "*":
                validate_field_name(column, _COLUMN_CONFIG)
        self._select_columns = list(columns) or ["*"]
        return self

    def sort(self, column: str, order: str | None = SORT_DESC) -> "CtePaginationBuilder":
        validate_field_name(column, _COLUMN_CONFIG)
        self._sort_column = column
        self._sort_order = normalize_order(order)
        return self

    def limit(self, limit: int) -> "CtePaginationBuilder":
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")
        self._limit = int(limit)
        return self

    # Conditions
    def add_condition(self, condition: str, param: Any) -> "CtePaginationBuilder":
        """Add a fragment with exactly one ``?`` bound to ``param``."""
        if _count_placeholders(condition) != 1:
            raise ValueError(f"Condition must contain one placeholder: {condition!r}")
        self._conditions.append(condition)
        self._filter_params.append(FilterValue.of(param).to_string_value())
        return self

    def add_raw_condition(self, condition: str) -> "CtePaginationBuilder":
        """Add a fragment with no placeholders (e.g. ``deleted_at IS NULL``)."""
        if _count_placeholders(condition):
            raise ValueError(f"Raw condition must not contain placeholders: {condition!r}")
        self._conditions.append(condition)
        return self

    def add_search(self, condition: str, params: Sequence[Any]) -> "CtePaginationBuilder":
        """Add a fragment with several placeholders, bound in order."""
        if _count_placeholders(condition) != len(params):
            raise ValueError(
                f"Condition has {_count_placeholders(condition)} placeholders "
                f"but {len(params)} params were given: {condition!r}"
            )
        self._conditions.append(condition)
        self._filter_params.extend(FilterValue.of(p).to_string_value() for p in params)
        return self

    def keyset_after(
        self,
        cursor_value: float | int | str,
        cursor_id: str,
        is_desc: bool,
        direction: str = DIRECTION_NEXT,
    ) -> "CtePaginationBuilder":
        """Restrict the page to rows strictly beyond the cursor boundary.

        Ties on the sort column are broken by id, so rows sharing a sort
        value are neither skipped nor repeated. Replaces any earlier
        boundary. The predicate is rendered against whatever sort column is
        set when a statement is built.
        """
        self._keyset_operator = keyset_operator(is_desc, direction)

        value = FilterValue.of(cursor_value).to_string_value()
        self._keyset_params = [value, value, str(cursor_id)]
        return self

    # Introspection
    @property
    def table(self) -> str:
        return self._table

    @property
    def sort_column(self) -> str:
        return self._sort_column

    @property
    def sort_order(self) -> str:
        return self._sort_order

    @property
    def page_limit(self) -> int:
        return self._limit

    @property
    def conditions(self) -> list[str]:
        return list(self._conditions)

    @property
    def filter_params(self) -> list[str]:
        return list(self._filter_params)

    @property
    def keyset_params(self) -> list[str]:
        return list(self._keyset_params)

    # Statements
    def _keyset_condition(self) -> str | None:
        if self._keyset_operator is None:
            return None
        col, op = self._sort_column, self._keyset_operator
        return f"(({col} {op} ?) OR ({col} = ? AND id {op} ?))"

    def _where(self, parts: list[str]) -> str:
        return f"WHERE {' AND '.join(parts)}" if parts else ""

    def build_count(self) -> tuple[str, list[str]]:
        """Total matching rows; the keyset boundary does not apply."""
        sql = f"SELECT COUNT(*) FROM {self._table}"
        if self._conditions:
            sql = f"{sql} {self._where(self._conditions)}"
        return sql, list(self._filter_params)

    def build_cte(self, direction: str = DIRECTION_NEXT, is_desc: bool | None = None) -> tuple[str, list[str]]:
        """Keyset page query, parameters ordered filter, keyset, limit.

        For ``prev`` the ordering is inverted so the rows closest to the
        boundary come first. Pass the fetched rows through :meth:`finalize`
        to restore display order.
        """
        if is_desc is None:
            is_desc = self._sort_order == SORT_DESC

        if normalize_direction(direction) == DIRECTION_PREV:
            order_dir = SORT_ASC if is_desc else SORT_DESC
        else:
            order_dir = self._sort_order

        where_parts = list(self._conditions)
        keyset_condition = self._keyset_condition()
        if keyset_condition:
            where_parts.append(keyset_condition)

        col = self._sort_column
        outer_columns = ", ".join(
            "r.*" if c == "*" else (c if "." in c else f"r.{c}") for c in self._select_columns
        )
        lines = [
            "WITH ids AS (",
            f"    SELECT id, {col}",
            f"    FROM {self._table}",
            f"    {self._where(where_parts)}" if where_parts else None,
            f"    ORDER BY {col} {order_dir}, id {order_dir}",
            "    LIMIT ?",
            ")",
            f"SELECT {outer_columns}",
            f"FROM {self._table} r",
            "INNER JOIN ids ON r.id = ids.id",
            f"ORDER BY ids.{col} {order_dir}, ids.id {order_dir}",
        ]
        sql = "\n".join(line for line in lines if line is not None)

        params = [*self._filter_params, *self._keyset_params, str(self._limit + 1)]
        return sql, params

    def build_simple(self, offset: int = 0) -> tuple[str, list[str]]:
        """Offset page query, parameters ordered filter, limit, offset.

        The table is aliased ``r`` as in :meth:`build_cte`, so qualified
        select columns resolve in both statements.
        """
        lines = [
            f"SELECT {', '.join(self._select_columns)}",
            f"FROM {self._table} r",
            self._where(self._conditions) or None,
            f"ORDER BY {self._sort_column} {self._sort_order}, id {self._sort_order}",
            "LIMIT ? OFFSET ?",
        ]
        sql = "\n".join(line for line in lines if line is not None)
        return sql, [*self._filter_params, str(self._limit), str(max(offset, 0))]

    def finalize(self, rows: Sequence[Any], direction: str = DIRECTION_NEXT) -> KeysetPage:
        """Turn rows fetched with :meth:`build_cte` into a display-ordered page.

        Drops the probe row beyond ``limit`` and, for ``prev``, reverses
        the rows, which were fetched nearest-boundary first.
        """
        page = list(rows[: self._limit])
        has_more = len(rows) > self._limit
        if normalize_direction(direction) == DIRECTION_PREV:
            page.reverse()
        return KeysetPage(rows=page, has_more=has_more)
