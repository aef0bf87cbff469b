"""Hybrid offset/keyset pagination and safe query construction."""

from lims.pagination.builder import CtePaginationBuilder, KeysetPage, keyset_operator
from lims.pagination.cursor import (
    decode_cursor,
    decode_cursor_datetime,
    encode_cursor,
    encode_cursor_datetime,
)
from lims.pagination.exceptions import (
    FieldErrorReason,
    FieldValidationError,
    FilterValueError,
    InvalidCursorError,
    NotArrayError,
    NotRangeError,
    NotScalarError,
    PaginationError,
)
from lims.pagination.filters import Filter, FilterOperator, apply_filters, escape_like_value
from lims.pagination.schemas import (
    PaginatedResponse,
    PaginationInfo,
    PaginationQuery,
    SortingInfo,
)
from lims.pagination.sorting import (
    BATCH_SORT_WHITELIST,
    REAGENT_SORT_WHITELIST,
    CursorKind,
    SortWhitelist,
)
from lims.pagination.values import FilterKind, FilterValue
from lims.pagination.whitelist import (
    RESOURCE_WHITELISTS,
    FieldConfig,
    FieldWhitelist,
    is_safe_field_name,
    validate_field_name,
)

__all__ = [
    # Builder
    "CtePaginationBuilder",
    "KeysetPage",
    "keyset_operator",
    # Cursors
    "decode_cursor",
    "decode_cursor_datetime",
    "encode_cursor",
    "encode_cursor_datetime",
    # Errors
    "FieldErrorReason",
    "FieldValidationError",
    "FilterValueError",
    "InvalidCursorError",
    "NotArrayError",
    "NotRangeError",
    "NotScalarError",
    "PaginationError",
    # Filters
    "Filter",
    "FilterOperator",
    "FilterKind",
    "FilterValue",
    "apply_filters",
    "escape_like_value",
    # Schemas
    "PaginatedResponse",
    "PaginationInfo",
    "PaginationQuery",
    "SortingInfo",
    # Sorting
    "BATCH_SORT_WHITELIST",
    "REAGENT_SORT_WHITELIST",
    "CursorKind",
    "SortWhitelist",
    # Whitelists
    "RESOURCE_WHITELISTS",
    "FieldConfig",
    "FieldWhitelist",
    "is_safe_field_name",
    "validate_field_name",
]
