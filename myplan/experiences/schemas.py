import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, validator


class ExperienceDetailInput(BaseModel):
    experience_detail_id: Optional[int] = None
    date: dt.date
    time: Optional[dt.time] = None
    price: Decimal = Field(..., ge=0)

    @property
    def is_new(self) -> bool:
        return not self.experience_detail_id


class ExperienceForm(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    type: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    min_price: Decimal = Field(0, ge=0)
    max_price: Decimal = Field(0, ge=0)
    start_date: date
    end_date: date
    max_capacity: int = Field(..., ge=1)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    long: Optional[float] = Field(None, ge=-180, le=180)
    details: List[ExperienceDetailInput] = []

    @validator("end_date")
    def end_after_start(cls, v, values):
        if "start_date" in values and v < values["start_date"]:
            raise ValueError("End date must be after or equal to start date.")
        return v


class ExperienceDetailResponse(BaseModel):
    experience_detail_id: int
    date: dt.date
    time: Optional[dt.time] = None
    price: Decimal
    status: str

    class Config:
        from_attributes = True


class ImageResponse(BaseModel):
    image_id: int
    attachment: str
    image_time: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExperienceResponse(BaseModel):
    experience_id: int
    title: str
    description: str
    type: Optional[str] = None
    location: Optional[str] = None
    min_price: Decimal
    max_price: Decimal
    start_date: date
    end_date: date
    max_capacity: int
    lat: Optional[float] = None
    long: Optional[float] = None
    added_at: Optional[datetime] = None
    type_badge: str = ""
    details: List[ExperienceDetailResponse] = []
    images: List[ImageResponse] = []

    class Config:
        from_attributes = True


class ExperienceSummary(BaseModel):
    experience_id: int
    title: str
    type: Optional[str] = None
    location: Optional[str] = None
    start_date: date
    end_date: date
    min_price: Decimal
    max_price: Decimal
    image_count: int
    detail_count: int
    first_image: Optional[str] = None
    type_badge: str = ""
