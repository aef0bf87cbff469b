"""Reagent batch model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lims.enums import BatchStatus
from lims.models.base import Base, SoftDeleteMixin, TimestampMixin, new_id

if TYPE_CHECKING:
    from lims.models.reagent import Reagent


class Batch(Base, TimestampMixin, SoftDeleteMixin):
    """One received lot of a reagent."""

    __tablename__ = "batches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    reagent_id: Mapped[str] = mapped_column(
        ForeignKey("reagents.id", ondelete="CASCADE"), index=True
    )
    batch_number: Mapped[str] = mapped_column(String(100), nullable=False)
    cat_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    quantity: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    original_quantity: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    reserved_quantity: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), default="g", nullable=False)

    expiry_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    received_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    manufacturer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=BatchStatus.AVAILABLE.value, nullable=False, index=True
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    reagent: Mapped["Reagent"] = relationship("Reagent", back_populates="batches")

    __table_args__ = (
        Index("ix_batches_quantity_id", "quantity", "id"),
        Index("ix_batches_created_at_id", "created_at", "id"),
    )

    def __repr__(self) -> str:
        return f"<Batch(id={self.id}, batch_number={self.batch_number})>"
