"""Errors raised by the pagination and query-construction layer."""

import enum


class PaginationError(Exception):
    """Base error for listing requests that cannot be turned into SQL."""


class InvalidCursorError(PaginationError):
    """Cursor token could not be decoded."""

    def __init__(self, cursor: str) -> None:
        self.cursor = cursor
        super().__init__("Invalid pagination cursor")


class FieldErrorReason(str, enum.Enum):
    """Which identifier rule a field name broke."""

    EMPTY = "empty"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INVALID_START = "invalid_start"
    INVALID_CHARACTER = "invalid_character"
    CONSECUTIVE_UNDERSCORES = "consecutive_underscores"
    RESERVED_WORD = "reserved_word"
    INVALID_FORMAT = "invalid_format"
    NOT_IN_WHITELIST = "not_in_whitelist"


class FieldValidationError(PaginationError):
    """A column-shaped identifier was rejected."""

    def __init__(self, field: str, reason: FieldErrorReason, detail: str) -> None:
        self.field = field
        self.reason = reason
        self.detail = detail
        super().__init__(detail)


class FilterValueError(PaginationError, TypeError):
    """A filter value was projected into the wrong shape."""


class NotScalarError(FilterValueError):
    pass


class NotArrayError(FilterValueError):
    pass


class NotRangeError(FilterValueError):
    pass
