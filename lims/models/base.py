"""Declarative base and shared column mixins."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    """Primary key for a new record (UUID4 text)."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""


class TimestampMixin:
    """Audit columns shared by every listed record."""

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow, nullable=False
    )
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(36), nullable=True)


class SoftDeleteMixin:
    """Rows with ``deleted_at`` set are hidden from listings."""

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
