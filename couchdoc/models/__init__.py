"""
Pydantic models for couchdoc.

Option and envelope shapes only. No imports from the service or store.
"""

from couchdoc.models.options import PaginationConfig, ServiceOptions
from couchdoc.models.page import Page

__all__ = [
    "PaginationConfig",
    "ServiceOptions",
    "Page",
]
