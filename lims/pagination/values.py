"""Typed filter values for parameter binding.

Every value bound into a listing query goes through :class:`FilterValue`,
which keeps single-placeholder binds and multi-placeholder binds (IN lists,
BETWEEN ranges) apart.
"""

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from lims.pagination.exceptions import NotArrayError, NotRangeError, NotScalarError


class FilterKind(str, enum.Enum):
    """Variant tag of a FilterValue."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING_ARRAY = "string_array"
    INTEGER_ARRAY = "integer_array"
    FLOAT_ARRAY = "float_array"
    STRING_RANGE = "string_range"
    INTEGER_RANGE = "integer_range"
    FLOAT_RANGE = "float_range"
    NULL = "null"


_SCALARS = frozenset({
    FilterKind.STRING, FilterKind.INTEGER, FilterKind.FLOAT, FilterKind.BOOLEAN, FilterKind.NULL,
})
_ARRAYS = frozenset({FilterKind.STRING_ARRAY, FilterKind.INTEGER_ARRAY, FilterKind.FLOAT_ARRAY})
_RANGES = frozenset({FilterKind.STRING_RANGE, FilterKind.INTEGER_RANGE, FilterKind.FLOAT_RANGE})


def _text(value: Any) -> str:
    """Canonical bind text for one scalar."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return repr(value)
    return str(value)


@dataclass(frozen=True, slots=True)
class FilterValue:
    """One filter input, tagged with its variant.

    Arrays are stored as tuples and ranges as ``(from, to)`` pairs.
    Construct through the classmethods or :meth:`of`.
    """

    kind: FilterKind
    value: Any = None

    # Constructors
    @classmethod
    def string(cls, value: str) -> "FilterValue":
        return cls(FilterKind.STRING, str(value))

    @classmethod
    def integer(cls, value: int) -> "FilterValue":
        return cls(FilterKind.INTEGER, int(value))

    @classmethod
    def floating(cls, value: float) -> "FilterValue":
        return cls(FilterKind.FLOAT, float(value))

    @classmethod
    def boolean(cls, value: bool) -> "FilterValue":
        return cls(FilterKind.BOOLEAN, bool(value))

    @classmethod
    def null(cls) -> "FilterValue":
        return cls(FilterKind.NULL)

    @classmethod
    def string_array(cls, values: Sequence[str]) -> "FilterValue":
        return cls(FilterKind.STRING_ARRAY, tuple(str(v) for v in values))

    @classmethod
    def integer_array(cls, values: Sequence[int]) -> "FilterValue":
        return cls(FilterKind.INTEGER_ARRAY, tuple(int(v) for v in values))

    @classmethod
    def float_array(cls, values: Sequence[float]) -> "FilterValue":
        return cls(FilterKind.FLOAT_ARRAY, tuple(float(v) for v in values))

    @classmethod
    def string_range(cls, start: str, end: str) -> "FilterValue":
        return cls(FilterKind.STRING_RANGE, (str(start), str(end)))

    @classmethod
    def integer_range(cls, start: int, end: int) -> "FilterValue":
        return cls(FilterKind.INTEGER_RANGE, (int(start), int(end)))

    @classmethod
    def float_range(cls, start: float, end: float) -> "FilterValue":
        return cls(FilterKind.FLOAT_RANGE, (float(start), float(end)))

    @classmethod
    def of(cls, value: Any) -> "FilterValue":
        """Convert a native Python value into the matching variant.

        Lists and tuples become arrays; their element type is taken from
        the elements (all ints -> integer array, any float -> float array,
        otherwise strings). Ranges have no native form and must be built
        with the range constructors.
        """
        if isinstance(value, FilterValue):
            return value
        if value is None:
            return cls.null()
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, float):
            return cls.floating(value)
        if isinstance(value, str):
            return cls.string(value)
        if isinstance(value, (list, tuple)):
            if value and all(isinstance(v, int) and not isinstance(v, bool) for v in value):
                return cls.integer_array(value)
            if value and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value):
                return cls.float_array(value)
            return cls.string_array([_text(v) for v in value])
        raise TypeError(f"Unsupported filter value type: {type(value).__name__}")

    # Type checks
    def is_scalar(self) -> bool:
        return self.kind in _SCALARS

    def is_array(self) -> bool:
        return self.kind in _ARRAYS

    def is_range(self) -> bool:
        return self.kind in _RANGES

    def is_null(self) -> bool:
        return self.kind is FilterKind.NULL

    def array_len(self) -> int | None:
        return len(self.value) if self.is_array() else None

    # Projections
    def to_string_value(self) -> str:
        """Render a scalar as bind text (booleans as ``"1"``/``"0"``).

        Raises:
            NotScalarError: For array and range variants
        """
        if self.kind is FilterKind.NULL:
            return ""
        if not self.is_scalar():
            raise NotScalarError("Cannot convert array/range to single string value")
        return _text(self.value)

    def as_string_array(self) -> list[str]:
        """Render an array variant as bind texts.

        Raises:
            NotArrayError: For every non-array variant
        """
        if not self.is_array():
            raise NotArrayError("Value is not an array")
        return [_text(v) for v in self.value]

    def as_range_strings(self) -> tuple[str, str]:
        """Render a range variant as ``(from, to)`` bind texts.

        Raises:
            NotRangeError: For every non-range variant
        """
        if not self.is_range():
            raise NotRangeError("Value is not a range")
        start, end = self.value
        return _text(start), _text(end)
