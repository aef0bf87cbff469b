"""Utility modules for the LIMS application."""

from lims.utils.logging import LogContext, get_logger, setup_logging

__all__ = [
    "get_logger",
    "LogContext",
    "setup_logging",
]
