from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, validator


class AdminAuthor(BaseModel):
    kind: Literal["Admin"] = "Admin"
    admin_id: int


class VisitorAuthor(BaseModel):
    kind: Literal["Visitor"] = "Visitor"
    visitor_id: int


# A highlight is written by exactly one admin or one visitor
HighlightAuthor = Annotated[Union[AdminAuthor, VisitorAuthor], Field(discriminator="kind")]


class HighlightCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: Optional[str] = None
    description: Optional[str] = Field(None, max_length=1000)


class HighlightUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = None
    description: Optional[str] = Field(None, max_length=1000)

    @validator("title")
    def title_not_null(cls, v):
        if v is None:
            raise ValueError("Title is required")
        return v


class HighlightBulkDelete(BaseModel):
    ids: List[int] = []


class HighlightResponse(BaseModel):
    highlight_id: int
    title: str
    content: Optional[str] = None
    short_content: str = ""
    description: Optional[str] = None
    image: Optional[str] = None
    highlight_time: Optional[datetime] = None
    time_ago: str = ""
    author: Optional[HighlightAuthor] = None
    created_by: str = "Unknown"
    created_by_type: str = "Unknown"
    created_by_email: Optional[str] = None
    creator_badge: str = ""
    creator_icon: str = ""
