"""
Explore & Home Module

Public browse views assembled from plain queries: search with category and
weekend/near-me/popular filters, featured experiences by average rating,
random recommendations, category facets, recent visitor highlights, the
visitor directory, the home page list and the map.
"""

from .router import router
from .service import ExploreService, geocode
from .schemas import (
    ExploreFilter, ExperienceCard, CategoryFacet, FriendHighlight, FriendSummary,
    ExploreResponse, HomeExperience, MapPoint
)

__all__ = [
    "router",
    "ExploreService",
    "geocode",
    "ExploreFilter",
    "ExperienceCard",
    "CategoryFacet",
    "FriendHighlight",
    "FriendSummary",
    "ExploreResponse",
    "HomeExperience",
    "MapPoint",
]
