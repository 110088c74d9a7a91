from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class ExploreFilter(str, Enum):
    WEEKEND = "weekend"
    NEAR_ME = "near_me"
    POPULAR = "popular"


class ExperienceCard(BaseModel):
    experience_id: int
    title: str
    type: Optional[str] = None
    location: Optional[str] = None
    start_date: date
    end_date: date
    min_price: Decimal
    price_text: str
    rating: float
    review_count: int = 0
    image: str
    type_badge: str = ""


class CategoryFacet(BaseModel):
    name: str
    icon: str
    count: int
    count_text: str


class FriendHighlight(BaseModel):
    highlight_id: int
    title: str
    content: str
    image: Optional[str] = None
    author_name: str
    author_avatar: str
    time_ago: str


class FriendSummary(BaseModel):
    visitor_id: int
    full_name: str
    username: str
    initials: str
    image: Optional[str] = None
    confirmed_bookings: int


class ExploreResponse(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    filter: Optional[ExploreFilter] = None
    results: List[ExperienceCard]
    featured: List[ExperienceCard]
    recommendations: List[ExperienceCard]
    categories: List[CategoryFacet]
    friends_highlights: List[FriendHighlight]
    friends: List[FriendSummary]


class HomeExperience(BaseModel):
    experience_id: int
    title: str
    type: Optional[str] = None
    location: Optional[str] = None
    start_date: date
    time: str
    price_text: str
    rating: float
    image: str


class MapPoint(BaseModel):
    experience_id: int
    title: str
    location: str
    lat: float
    lng: float
    start_date: date
    end_date: date
    type: Optional[str] = None
    price_text: str
