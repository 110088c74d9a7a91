from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, validator

END_BEFORE_START = "End date must be after or equal to start date."


class ItineraryCreate(BaseModel):
    experience_id: int
    start_date: date
    end_date: date
    day: int = Field(1, ge=1)
    description: str = Field(..., min_length=1, max_length=500)

    @validator("end_date")
    def end_not_before_start(cls, v, values):
        if "start_date" in values and v < values["start_date"]:
            raise ValueError(END_BEFORE_START)
        return v


class ItineraryUpdate(ItineraryCreate):
    pass


class ItineraryResponse(BaseModel):
    itinerary_id: int
    experience_id: Optional[int] = None
    experience_title: Optional[str] = None
    start_date: date
    end_date: date
    day: int
    description: str
    added_at: Optional[datetime] = None
