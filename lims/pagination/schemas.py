"""Pydantic schemas for listing requests and paginated responses."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, field_validator

from lims.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_ORDER,
    DIRECTION_NEXT,
    DIRECTION_PREV,
    MAX_OFFSET,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
    SORT_ASC,
    SORT_DESC,
)

T = TypeVar("T")


class PaginationQuery(BaseModel):
    """Listing request as parsed from query parameters.

    A present ``cursor`` selects keyset pagination; otherwise ``page`` and
    ``page_size`` select an offset page.
    """

    page: int | None = None
    page_size: int | None = None
    cursor: str | None = None
    direction: str = DIRECTION_NEXT
    search: str | None = None
    q: str | None = None  # alias for search used by the web client
    filters: dict[str, Any] = Field(default_factory=dict)
    sort_by: str | None = None
    sort_order: str = DEFAULT_SORT_ORDER

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: str | None) -> str:
        return DIRECTION_PREV if v == DIRECTION_PREV else DIRECTION_NEXT

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v: str | None) -> str:
        return SORT_ASC if (v or "").upper() == SORT_ASC else SORT_DESC

    @field_validator("cursor", mode="before")
    @classmethod
    def blank_cursor_is_none(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    def normalize(
        self,
        max_page_size: int = MAX_PAGE_SIZE,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[int, int, int]:
        """Return ``(page, page_size, offset)`` with defaults and clamping.

        ``page`` is capped so the offset still fits the database's OFFSET.
        """
        page_size = self.page_size if self.page_size is not None else default_page_size
        page_size = min(max(page_size, MIN_PAGE_SIZE), max_page_size)
        page = max(self.page or DEFAULT_PAGE, 1)
        page = min(page, MAX_OFFSET // page_size + 1)
        return page, page_size, (page - 1) * page_size

    @property
    def is_cursor_mode(self) -> bool:
        return self.cursor is not None

    @property
    def is_desc(self) -> bool:
        return self.sort_order == SORT_DESC

    def get_search(self) -> str | None:
        """Search text from ``search`` or ``q``, trimmed; blank is None."""
        for value in (self.search, self.q):
            if value is not None and value.strip():
                return value.strip()
        return None


class PaginationInfo(BaseModel):
    """Pagination envelope for both offset and keyset modes."""

    total: int
    page: int | None = None
    per_page: int
    total_pages: int | None = None
    has_next: bool = False
    has_prev: bool = False
    next_cursor: str | None = None
    prev_cursor: str | None = None

    @classmethod
    def from_page(
        cls,
        total: int,
        page: int,
        per_page: int,
        next_cursor: str | None = None,
    ) -> "PaginationInfo":
        total_pages = (total + per_page - 1) // per_page
        return cls(
            total=total,
            page=page,
            per_page=per_page,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
            next_cursor=next_cursor,
        )

    @classmethod
    def from_cursor(
        cls,
        total: int,
        per_page: int,
        has_next: bool,
        has_prev: bool,
        next_cursor: str | None,
        prev_cursor: str | None,
    ) -> "PaginationInfo":
        return cls(
            total=total,
            per_page=per_page,
            has_next=has_next,
            has_prev=has_prev,
            next_cursor=next_cursor,
            prev_cursor=prev_cursor,
        )


class SortingInfo(BaseModel):
    """Sort actually applied, echoed back to the client."""

    sort_by: str
    sort_order: str


class PaginatedResponse(BaseModel, Generic[T]):
    """List response with pagination and sorting metadata."""

    data: list[T]
    pagination: PaginationInfo
    sorting: SortingInfo
