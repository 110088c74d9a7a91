"""
Experience Management Module

Admin CRUD for experiences, their bookable date/time/price slots and images.
Edits only ever append slots so existing bookings keep their references.
"""

from .router import router
from .service import ExperienceService
from .schemas import (
    ExperienceForm, ExperienceDetailInput, ExperienceResponse,
    ExperienceDetailResponse, ExperienceSummary, ImageResponse
)

__all__ = [
    "router",
    "ExperienceService",
    "ExperienceForm",
    "ExperienceDetailInput",
    "ExperienceResponse",
    "ExperienceDetailResponse",
    "ExperienceSummary",
    "ImageResponse",
]
