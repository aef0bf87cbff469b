"""Reagent API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lims.api.deps import pagination_query
from lims.db import get_db
from lims.db.crud import get_reagent_list
from lims.models.schemas import ReagentRead, SortFieldsRead
from lims.pagination import (
    REAGENT_SORT_WHITELIST,
    FieldValidationError,
    InvalidCursorError,
    PaginatedResponse,
    PaginationQuery,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=PaginatedResponse[ReagentRead])
async def list_reagents(
    db: Annotated[AsyncSession, Depends(get_db)],
    query: Annotated[PaginationQuery, Depends(pagination_query)],
    status: Annotated[str | None, Query()] = None,
    manufacturer: Annotated[str | None, Query()] = None,
    has_stock: Annotated[bool | None, Query()] = None,
) -> PaginatedResponse[ReagentRead]:
    """List reagents.

    Pass ``next_cursor`` / ``prev_cursor`` from a previous response as
    ``cursor`` (with ``direction=prev`` for the latter) to page by keyset
    instead of by page number.
    """
    query.filters.update(
        {
            key: value
            for key, value in (
                ("status", status),
                ("manufacturer", manufacturer),
                ("has_stock", has_stock),
            )
            if value is not None
        }
    )

    try:
        rows, pagination, sorting = await get_reagent_list(db, query)
    except (FieldValidationError, InvalidCursorError) as e:
        logger.warning(f"Rejected reagent listing request: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e

    return PaginatedResponse[ReagentRead](
        data=[ReagentRead.model_validate(row) for row in rows],
        pagination=pagination,
        sorting=sorting,
    )


@router.get("/sort-fields", response_model=SortFieldsRead)
async def get_reagent_sort_fields() -> SortFieldsRead:
    """Sort keys accepted by the reagent listing."""
    return SortFieldsRead(
        fields=REAGENT_SORT_WHITELIST.supported_fields(),
        keyset_fields=REAGENT_SORT_WHITELIST.keyset_keys(),
        default=REAGENT_SORT_WHITELIST.default,
    )
