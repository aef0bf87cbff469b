"""Tests for the reagent listing."""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from lims.db.crud import build_reagent_query, get_reagent_list
from lims.db.pagination import decode_boundary
from lims.models import Reagent
from lims.pagination import (
    CursorKind,
    InvalidCursorError,
    PaginationQuery,
    encode_cursor,
    encode_cursor_datetime,
)
from lims.pagination.cursor import datetime_to_micros

ReagentFactory = Callable[..., Awaitable[Reagent]]


def _expected_ids(reagents: list[Reagent], key: str, desc: bool = True) -> list[str]:
    return [
        r.id
        for r in sorted(reagents, key=lambda r: (getattr(r, key), r.id), reverse=desc)
    ]


async def _walk(db: AsyncSession, **params) -> list[str]:
    """Follow next cursors from the first offset page to the end."""
    rows, info, _ = await get_reagent_list(db, PaginationQuery(**params))
    seen = [row["id"] for row in rows]
    while info.has_next:
        assert info.next_cursor is not None
        rows, info, _ = await get_reagent_list(
            db, PaginationQuery(cursor=info.next_cursor, **params)
        )
        seen.extend(row["id"] for row in rows)
    return seen


class TestBuildReagentQuery:
    """Tests for build_reagent_query."""

    def test_always_hides_deleted(self):
        """Test soft-deleted rows are excluded without any filters."""
        builder = build_reagent_query(PaginationQuery())

        assert builder.conditions == ["deleted_at IS NULL"]

    def test_filters_and_search(self):
        """Test recognized filters become bound conditions."""
        query = PaginationQuery(
            search="50%",
            filters={"status": "Active", "manufacturer": "Merck", "has_stock": True},
        )

        builder = build_reagent_query(query)

        assert builder.conditions[:4] == [
            "deleted_at IS NULL",
            "status = ?",
            "manufacturer = ?",
            "total_quantity > ?",
        ]
        assert builder.filter_params == ["active", "Merck", "0", *["%50\\%%"] * 4]
        assert "manufacturer LIKE ? ESCAPE '\\'" in builder.conditions[-1]

    def test_unknown_status_ignored(self):
        """Test unrecognized status values do not filter."""
        builder = build_reagent_query(PaginationQuery(filters={"status": "bogus"}))

        assert builder.conditions == ["deleted_at IS NULL"]


class TestKeysetWalk:
    """Tests for walking reagent pages by cursor."""

    @pytest.mark.asyncio
    async def test_walk_with_duplicate_quantities(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test every row is visited once in (quantity, id) order."""
        reagents = [
            await make_reagent(total_quantity=q) for q in (5, 5, 5, 3, 3, 1, 1, 0)
        ]

        seen = await _walk(db_session, page_size=3)

        assert seen == _expected_ids(reagents, "total_quantity")

    @pytest.mark.asyncio
    async def test_walk_ascending(self, db_session: AsyncSession, make_reagent: ReagentFactory):
        """Test ascending walks use the mirrored predicate."""
        reagents = [await make_reagent(total_quantity=q) for q in (2.5, 1, 2.5, 7, 1)]

        seen = await _walk(db_session, page_size=2, sort_order="asc")

        assert seen == _expected_ids(reagents, "total_quantity", desc=False)

    @pytest.mark.asyncio
    async def test_walk_by_created_at(self, db_session: AsyncSession, make_reagent: ReagentFactory):
        """Test timestamp cursors with identical creation times."""
        reagents = [await make_reagent(minutes=m) for m in (1, 2, 2, 2, 3, 4)]

        seen = await _walk(db_session, page_size=2, sort_by="created_at")

        assert seen == _expected_ids(reagents, "created_at")

    @pytest.mark.asyncio
    async def test_walk_by_batches_count(self, db_session: AsyncSession, make_reagent: ReagentFactory):
        """Test integer columns page with numeric cursors."""
        reagents = [await make_reagent(batches_count=c) for c in (0, 4, 4, 2, 9)]

        seen = await _walk(db_session, page_size=2, sort_by="batches_count")

        assert seen == _expected_ids(reagents, "batches_count")

    @pytest.mark.asyncio
    async def test_prev_returns_previous_page(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test paging back restores the earlier page in display order."""
        for q in (9, 8, 8, 7, 6, 5):
            await make_reagent(total_quantity=q)

        first, info, _ = await get_reagent_list(db_session, PaginationQuery(page_size=2))
        second, info, _ = await get_reagent_list(
            db_session, PaginationQuery(page_size=2, cursor=info.next_cursor)
        )
        assert info.has_prev
        assert len(second) == 2
        assert info.prev_cursor is not None

        back, back_info, _ = await get_reagent_list(
            db_session,
            PaginationQuery(page_size=2, cursor=info.prev_cursor, direction="prev"),
        )

        assert [r["id"] for r in back] == [r["id"] for r in first]
        assert back_info.has_next
        assert not back_info.has_prev
        assert back_info.next_cursor is not None
        assert back_info.prev_cursor is None

    @pytest.mark.asyncio
    async def test_keyset_envelope(self, db_session: AsyncSession, make_reagent: ReagentFactory):
        """Test keyset pages report total but no page numbers."""
        for q in (3, 2, 1):
            await make_reagent(total_quantity=q)

        _, info, _ = await get_reagent_list(db_session, PaginationQuery(page_size=2))
        rows, info, sorting = await get_reagent_list(
            db_session, PaginationQuery(page_size=2, cursor=info.next_cursor)
        )

        assert len(rows) == 1
        assert info.total == 3
        assert info.page is None
        assert info.total_pages is None
        assert not info.has_next
        assert info.next_cursor is None
        assert sorting.sort_by == "total_quantity"
        assert sorting.sort_order == "DESC"


class TestOffsetMode:
    """Tests for offset pages."""

    @pytest.mark.asyncio
    async def test_offset_pages(self, db_session: AsyncSession, make_reagent: ReagentFactory):
        """Test page numbers and totals."""
        reagents = [await make_reagent(total_quantity=q) for q in range(5)]
        expected = _expected_ids(reagents, "total_quantity")

        rows, info, _ = await get_reagent_list(db_session, PaginationQuery(page=2, page_size=2))

        assert [r["id"] for r in rows] == expected[2:4]
        assert info.total == 5
        assert info.page == 2
        assert info.total_pages == 3
        assert info.has_next
        assert info.has_prev

    @pytest.mark.asyncio
    async def test_page_beyond_offset_range(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test an enormous page number is an empty page, not a driver error."""
        await make_reagent(total_quantity=1)

        rows, info, _ = await get_reagent_list(db_session, PaginationQuery(page=10**18))

        assert rows == []
        assert info.total == 1
        assert not info.has_next
        assert info.has_prev

    @pytest.mark.asyncio
    async def test_offset_page_offers_cursor(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test keyset-eligible sorts hand out a cursor for the next page."""
        for q in (3, 2, 1):
            await make_reagent(total_quantity=q)

        rows, info, _ = await get_reagent_list(db_session, PaginationQuery(page_size=2))

        assert info.next_cursor == encode_cursor(rows[-1]["total_quantity"], rows[-1]["id"])

    @pytest.mark.asyncio
    async def test_name_sort_has_no_cursor(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test text sorts stay in offset mode."""
        for name in ("Beta", "Alpha", "Gamma"):
            await make_reagent(name=name)

        rows, info, sorting = await get_reagent_list(
            db_session, PaginationQuery(page_size=2, sort_by="name", sort_order="asc")
        )

        assert [r["name"] for r in rows] == ["Alpha", "Beta"]
        assert info.next_cursor is None
        assert sorting.sort_by == "name"

    @pytest.mark.asyncio
    async def test_cursor_ignored_for_text_sort(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test a cursor with a non-keyset sort serves page 1."""
        for name in ("Beta", "Alpha"):
            await make_reagent(name=name)

        rows, info, _ = await get_reagent_list(
            db_session,
            PaginationQuery(cursor="not-a-cursor", sort_by="name", sort_order="asc"),
        )

        assert [r["name"] for r in rows] == ["Alpha", "Beta"]
        assert info.page == 1

    @pytest.mark.asyncio
    async def test_unknown_sort_uses_default(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test an unknown sort key falls back to total quantity."""
        await make_reagent(total_quantity=1)

        _, _, sorting = await get_reagent_list(
            db_session, PaginationQuery(sort_by="quantity; DROP TABLE reagents")
        )

        assert sorting.sort_by == "total_quantity"


class TestCursorErrors:
    """Tests for rejected cursors."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cursor", ["zz", "abc", "6e6f2d64656c696d69746572"])
    async def test_malformed_cursor(
        self, db_session: AsyncSession, make_reagent: ReagentFactory, cursor: str
    ):
        """Test malformed tokens are rejected."""
        await make_reagent(total_quantity=1)

        with pytest.raises(InvalidCursorError):
            await get_reagent_list(db_session, PaginationQuery(cursor=cursor))

    @pytest.mark.asyncio
    async def test_numeric_cursor_for_timestamp_sort(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test a cursor must match the sort column's kind."""
        await make_reagent(total_quantity=1)

        with pytest.raises(InvalidCursorError):
            await get_reagent_list(
                db_session,
                PaginationQuery(cursor=encode_cursor(1.5, "x"), sort_by="created_at"),
            )


class TestFilters:
    """Tests for reagent filters against the database."""

    @pytest.mark.asyncio
    async def test_soft_deleted_hidden(self, db_session: AsyncSession, make_reagent: ReagentFactory):
        """Test deleted reagents are neither listed nor counted."""
        kept = await make_reagent()
        await make_reagent(deleted_at=datetime(2024, 2, 1, tzinfo=UTC))

        rows, info, _ = await get_reagent_list(db_session, PaginationQuery())

        assert [r["id"] for r in rows] == [kept.id]
        assert info.total == 1

    @pytest.mark.asyncio
    async def test_status_filter(self, db_session: AsyncSession, make_reagent: ReagentFactory):
        """Test status filtering."""
        await make_reagent(status="active")
        archived = await make_reagent(status="archived")

        rows, info, _ = await get_reagent_list(
            db_session, PaginationQuery(filters={"status": "ARCHIVED"})
        )

        assert [r["id"] for r in rows] == [archived.id]
        assert info.total == 1

    @pytest.mark.asyncio
    async def test_has_stock(self, db_session: AsyncSession, make_reagent: ReagentFactory):
        """Test stock filters split on zero quantity."""
        stocked = await make_reagent(total_quantity=2.5)
        empty = await make_reagent(total_quantity=0)

        rows, _, _ = await get_reagent_list(db_session, PaginationQuery(filters={"has_stock": True}))
        assert [r["id"] for r in rows] == [stocked.id]

        rows, _, _ = await get_reagent_list(db_session, PaginationQuery(filters={"has_stock": False}))
        assert [r["id"] for r in rows] == [empty.id]

    @pytest.mark.asyncio
    async def test_search_matches_name_formula_cas_manufacturer(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test search covers name, formula, CAS number and manufacturer."""
        salt = await make_reagent(
            name="Sodium chloride",
            formula="NaCl",
            cas_number="7647-14-5",
            manufacturer="Sigma-Aldrich",
        )
        await make_reagent(
            name="Ethanol", formula="C2H5OH", cas_number="64-17-5", manufacturer="Merck"
        )

        for term in ("sodium", "nacl", "7647", "aldrich"):
            rows, _, _ = await get_reagent_list(db_session, PaginationQuery(search=term))
            assert [r["id"] for r in rows] == [salt.id], term

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test % and _ in search text match themselves."""
        literal = await make_reagent(name="Ethanol 50%")
        await make_reagent(name="Ethanol 500")
        await make_reagent(name="Ethanol_x")

        rows, _, _ = await get_reagent_list(db_session, PaginationQuery(q="50%"))
        assert [r["id"] for r in rows] == [literal.id]

        rows, _, _ = await get_reagent_list(db_session, PaginationQuery(q="l_x"))
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_walk_respects_filters(
        self, db_session: AsyncSession, make_reagent: ReagentFactory
    ):
        """Test filters apply on every keyset page."""
        active = [await make_reagent(total_quantity=q, status="active") for q in (4, 4, 2, 1)]
        for q in (4, 3):
            await make_reagent(total_quantity=q, status="inactive")

        seen = await _walk(db_session, page_size=2, filters={"status": "active"})

        assert seen == _expected_ids(active, "total_quantity")


class TestDecodeBoundary:
    """Tests for cursor decoding in the listing layer."""

    def test_timestamp_boundary_matches_storage_format(self):
        """Test timestamp cursors bind in the stored text format."""
        moment = datetime(2024, 1, 1, 12, 5, tzinfo=UTC)
        token = encode_cursor_datetime(datetime_to_micros(moment), "r-1")

        assert decode_boundary(token, CursorKind.TIMESTAMP) == ("2024-01-01 12:05:00.000000", "r-1")

    def test_out_of_range_timestamp(self):
        """Test timestamps beyond datetime's range are invalid cursors."""
        token = encode_cursor_datetime(10**20, "r-1")

        with pytest.raises(InvalidCursorError):
            decode_boundary(token, CursorKind.TIMESTAMP)
