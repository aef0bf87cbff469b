"""SQLAlchemy models."""

from lims.models.base import Base
from lims.models.batch import Batch
from lims.models.reagent import Reagent

__all__ = [
    "Base",
    "Batch",
    "Reagent",
]
