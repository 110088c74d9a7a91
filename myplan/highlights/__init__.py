"""
Highlights Module

Social posts authored by exactly one admin or one visitor. Authorship is
exposed as a tagged union (``AdminAuthor`` | ``VisitorAuthor``) and backed by
a check constraint on the table.
"""

from .router import router, admin_router
from .service import HighlightService, author_of, resolve_creator
from .schemas import (
    AdminAuthor, VisitorAuthor, HighlightAuthor, HighlightCreate, HighlightUpdate,
    HighlightBulkDelete, HighlightResponse
)

__all__ = [
    "router",
    "admin_router",
    "HighlightService",
    "author_of",
    "resolve_creator",
    "AdminAuthor",
    "VisitorAuthor",
    "HighlightAuthor",
    "HighlightCreate",
    "HighlightUpdate",
    "HighlightBulkDelete",
    "HighlightResponse",
]
