"""Batch API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lims.api.deps import pagination_query
from lims.db import get_db
from lims.db.crud import get_batch_list
from lims.models.schemas import BatchRead, SortFieldsRead
from lims.pagination import (
    BATCH_SORT_WHITELIST,
    FieldValidationError,
    InvalidCursorError,
    PaginatedResponse,
    PaginationQuery,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=PaginatedResponse[BatchRead])
async def list_batches(
    db: Annotated[AsyncSession, Depends(get_db)],
    query: Annotated[PaginationQuery, Depends(pagination_query)],
    reagent_id: Annotated[str | None, Query()] = None,
    status: Annotated[list[str] | None, Query()] = None,
    supplier: Annotated[str | None, Query()] = None,
    quantity_min: Annotated[float | None, Query()] = None,
    quantity_max: Annotated[float | None, Query()] = None,
) -> PaginatedResponse[BatchRead]:
    """List batches. ``status`` may be repeated or comma-separated."""
    if status:
        status = [part for item in status for part in item.split(",")]
    query.filters.update(
        {
            key: value
            for key, value in (
                ("reagent_id", reagent_id),
                ("status", status),
                ("supplier", supplier),
                ("quantity_min", quantity_min),
                ("quantity_max", quantity_max),
            )
            if value is not None
        }
    )

    try:
        rows, pagination, sorting = await get_batch_list(db, query)
    except (FieldValidationError, InvalidCursorError) as e:
        logger.warning(f"Rejected batch listing request: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e

    return PaginatedResponse[BatchRead](
        data=[BatchRead.model_validate(row) for row in rows],
        pagination=pagination,
        sorting=sorting,
    )


@router.get("/sort-fields", response_model=SortFieldsRead)
async def get_batch_sort_fields() -> SortFieldsRead:
    """Sort keys accepted by the batch listing."""
    return SortFieldsRead(
        fields=BATCH_SORT_WHITELIST.supported_fields(),
        keyset_fields=BATCH_SORT_WHITELIST.keyset_keys(),
        default=BATCH_SORT_WHITELIST.default,
    )
