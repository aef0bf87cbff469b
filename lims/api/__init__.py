"""API routers."""

from lims.api.router import api_router

__all__ = ["api_router"]
