"""CRUD operations module."""

from lims.db.crud.batches import build_batch_query, get_batch_list
from lims.db.crud.reagents import build_reagent_query, get_reagent_list

__all__ = [
    "build_batch_query",
    "build_reagent_query",
    "get_batch_list",
    "get_reagent_list",
]
