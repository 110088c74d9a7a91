from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, validator


class ReviewSort(str, Enum):
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    RATING_ASC = "rating_asc"
    RATING_DESC = "rating_desc"


class ReviewFilters(BaseModel):
    search: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    experience_type: Optional[str] = None
    sort_by: ReviewSort = ReviewSort.DATE_DESC


class ReviewCreate(BaseModel):
    experience_id: int
    booking_id: Optional[int] = None
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)

    @validator("rating")
    def rating_not_null(cls, v):
        if v is None:
            raise ValueError("Rating is required")
        return v


class BulkDeleteRequest(BaseModel):
    ids: List[int] = []


class ReviewResponse(BaseModel):
    review_id: int
    rating: int
    comment: Optional[str] = None
    short_comment: str = ""
    review_time: Optional[datetime] = None
    time_ago: str = ""
    stars: str = ""
    rating_label: str = ""
    rating_badge: str = ""
    booking_id: Optional[int] = None
    visitor_id: Optional[int] = None
    visitor_name: Optional[str] = None
    visitor_email: Optional[str] = None
    experience_id: Optional[int] = None
    experience_title: Optional[str] = None
    experience_type: Optional[str] = None


class ReviewStats(BaseModel):
    total: int
    average_rating: float
    rating_counts: Dict[int, int]


class ReviewListResponse(BaseModel):
    reviews: List[ReviewResponse]
    stats: ReviewStats
    filters: ReviewFilters
    experience_types: List[str]
