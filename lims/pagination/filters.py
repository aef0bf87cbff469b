"""Single-column filter predicates.

A :class:`Filter` names a whitelisted column, an operator and a
:class:`FilterValue`. Filters are combined with AND only; there is no
nesting.
"""

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from lims.constants import LIKE_ESCAPE_CHAR
from lims.pagination.builder import CtePaginationBuilder
from lims.pagination.values import FilterValue
from lims.pagination.whitelist import FieldWhitelist


def escape_like_value(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return (
        value.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
        .replace("[", "\\[")
    )


class FilterOperator(str, enum.Enum):
    """Comparison operators accepted in filters."""

    EQ = "eq"
    NEQ = "neq"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    LIKE = "like"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    IN = "in"
    NOT_IN = "not_in"
    BETWEEN = "between"
    NOT_BETWEEN = "not_between"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"

    def to_sql(self) -> str:
        return _OPERATOR_SQL[self]


_OPERATOR_SQL = {
    FilterOperator.EQ: "=",
    FilterOperator.NEQ: "!=",
    FilterOperator.LT: "<",
    FilterOperator.LTE: "<=",
    FilterOperator.GT: ">",
    FilterOperator.GTE: ">=",
    FilterOperator.LIKE: "LIKE",
    FilterOperator.STARTS_WITH: "LIKE",
    FilterOperator.ENDS_WITH: "LIKE",
    FilterOperator.IN: "IN",
    FilterOperator.NOT_IN: "NOT IN",
    FilterOperator.BETWEEN: "BETWEEN",
    FilterOperator.NOT_BETWEEN: "NOT BETWEEN",
    FilterOperator.IS_NULL: "IS NULL",
    FilterOperator.IS_NOT_NULL: "IS NOT NULL",
}

_COMPARISONS = frozenset({
    FilterOperator.EQ, FilterOperator.NEQ, FilterOperator.LT,
    FilterOperator.LTE, FilterOperator.GT, FilterOperator.GTE,
})
_LIKE_PATTERNS = {
    FilterOperator.LIKE: "%{}%",
    FilterOperator.STARTS_WITH: "{}%",
    FilterOperator.ENDS_WITH: "%{}",
}


@dataclass(frozen=True)
class Filter:
    """One predicate on one column."""

    field: str
    operator: FilterOperator
    value: FilterValue = FilterValue.null()

    @classmethod
    def eq(cls, column: str, value: Any) -> "Filter":
        return cls(column, FilterOperator.EQ, FilterValue.of(value))

    @classmethod
    def neq(cls, column: str, value: Any) -> "Filter":
        return cls(column, FilterOperator.NEQ, FilterValue.of(value))

    @classmethod
    def gt(cls, column: str, value: Any) -> "Filter":
        return cls(column, FilterOperator.GT, FilterValue.of(value))

    @classmethod
    def gte(cls, column: str, value: Any) -> "Filter":
        return cls(column, FilterOperator.GTE, FilterValue.of(value))

    @classmethod
    def lte(cls, column: str, value: Any) -> "Filter":
        return cls(column, FilterOperator.LTE, FilterValue.of(value))

    @classmethod
    def like(cls, column: str, value: str) -> "Filter":
        return cls(column, FilterOperator.LIKE, FilterValue.string(value))

    @classmethod
    def in_(cls, column: str, values: list[Any]) -> "Filter":
        return cls(column, FilterOperator.IN, FilterValue.of(list(values)))

    @classmethod
    def between(cls, column: str, value: FilterValue) -> "Filter":
        return cls(column, FilterOperator.BETWEEN, value)

    @classmethod
    def is_null(cls, column: str) -> "Filter":
        return cls(column, FilterOperator.IS_NULL)

    @classmethod
    def is_not_null(cls, column: str) -> "Filter":
        return cls(column, FilterOperator.IS_NOT_NULL)

    def to_sql(self, whitelist: FieldWhitelist) -> tuple[str, list[str]]:
        """Render as ``(fragment, params)``.

        Raises:
            FieldValidationError: If the column is not whitelisted
            FilterValueError: If the value shape does not fit the operator
        """
        whitelist.validate(self.field)
        column = self.field
        op = self.operator

        if op in (FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL):
            return f"{column} {op.to_sql()}", []

        if op in _COMPARISONS:
            return f"{column} {op.to_sql()} ?", [self.value.to_string_value()]

        if op in _LIKE_PATTERNS:
            pattern = _LIKE_PATTERNS[op].format(escape_like_value(self.value.to_string_value()))
            return f"{column} LIKE ? ESCAPE '{LIKE_ESCAPE_CHAR}'", [pattern]

        if op in (FilterOperator.IN, FilterOperator.NOT_IN):
            values = self.value.as_string_array()
            if not values:
                # IN () matches nothing, NOT IN () matches everything
                return ("1 = 0" if op is FilterOperator.IN else "1 = 1"), []
            placeholders = ", ".join("?" for _ in values)
            return f"{column} {op.to_sql()} ({placeholders})", values

        start, end = self.value.as_range_strings()
        return f"{column} {op.to_sql()} ? AND ?", [start, end]


def apply_filters(
    builder: CtePaginationBuilder,
    filters: Iterable[Filter],
    whitelist: FieldWhitelist,
) -> CtePaginationBuilder:
    """Add every filter to ``builder`` as an AND-ed condition."""
    for item in filters:
        fragment, params = item.to_sql(whitelist)
        if params:
            builder.add_search(fragment, params)
        else:
            builder.add_raw_condition(fragment)
    return builder
