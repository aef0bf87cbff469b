"""Pydantic schemas for listed records."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ReagentRead(BaseModel):
    """Reagent list item."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    formula: str | None = None
    cas_number: str | None = None
    manufacturer: str | None = None
    molecular_weight: float | None = None
    physical_state: str | None = None
    description: str | None = None
    status: str
    total_quantity: float
    reserved_quantity: float = 0.0
    batches_count: int = 0
    created_at: datetime
    updated_at: datetime


class BatchRead(BaseModel):
    """Batch list item."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    reagent_id: str
    batch_number: str
    cat_number: str | None = None
    quantity: float
    original_quantity: float = 0.0
    reserved_quantity: float = 0.0
    unit: str
    expiry_date: datetime | None = None
    received_date: datetime | None = None
    supplier: str | None = None
    manufacturer: str | None = None
    status: str
    location: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class SortFieldsRead(BaseModel):
    """Sort keys a listing accepts."""

    fields: list[str]
    keyset_fields: list[str]
    default: str
