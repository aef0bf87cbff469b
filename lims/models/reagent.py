"""Reagent model."""

from typing import TYPE_CHECKING

from sqlalchemy import Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lims.enums import ReagentStatus
from lims.models.base import Base, SoftDeleteMixin, TimestampMixin, new_id

if TYPE_CHECKING:
    from lims.models.batch import Batch


class Reagent(Base, TimestampMixin, SoftDeleteMixin):
    """Chemical reagent with stock aggregated over its batches."""

    __tablename__ = "reagents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    formula: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cas_number: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    manufacturer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    molecular_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    physical_state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ReagentStatus.ACTIVE.value, nullable=False, index=True
    )

    # Stock aggregates, maintained when batches change
    total_quantity: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    reserved_quantity: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    batches_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    batches: Mapped[list["Batch"]] = relationship("Batch", back_populates="reagent")

    # Keyset pagination walks (sort column, id)
    __table_args__ = (
        Index("ix_reagents_total_quantity_id", "total_quantity", "id"),
        Index("ix_reagents_batches_count_id", "batches_count", "id"),
        Index("ix_reagents_created_at_id", "created_at", "id"),
    )

    def __repr__(self) -> str:
        return f"<Reagent(id={self.id}, name={self.name})>"
