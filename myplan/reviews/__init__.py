"""
Reviews Module

Visitor ratings (1-5) and comments on experiences, optionally tied to one of
the visitor's bookings, plus the admin moderation listing with filters,
sorting, rating statistics and bulk deletion.
"""

from .router import router, admin_router
from .service import ReviewService
from .schemas import (
    ReviewSort, ReviewFilters, ReviewCreate, ReviewUpdate, BulkDeleteRequest,
    ReviewResponse, ReviewStats, ReviewListResponse
)

__all__ = [
    "router",
    "admin_router",
    "ReviewService",
    "ReviewSort",
    "ReviewFilters",
    "ReviewCreate",
    "ReviewUpdate",
    "BulkDeleteRequest",
    "ReviewResponse",
    "ReviewStats",
    "ReviewListResponse",
]
