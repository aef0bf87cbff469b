"""Main API router."""

from fastapi import APIRouter

from lims.api.batches import router as batches_router
from lims.api.reagents import router as reagents_router

api_router = APIRouter(prefix="/api")

api_router.include_router(batches_router, prefix="/batches", tags=["batches"])
api_router.include_router(reagents_router, prefix="/reagents", tags=["reagents"])
