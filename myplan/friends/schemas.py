import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class InvitationStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class InviteAction(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


# Friends
class InviteRequest(BaseModel):
    friend_id: int
    experience_id: int
    experience_detail_id: int
    message: Optional[str] = Field(None, max_length=500)


class InvitationResponse(BaseModel):
    invitation_id: int
    visitor_id: Optional[int] = None
    receiver_id: Optional[int] = None
    receiver_email: str
    experience_detail_id: Optional[int] = None
    message: Optional[str] = None
    status: str
    token: str
    sent_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UpcomingExperience(BaseModel):
    booking_id: int
    experience_id: int
    title: str
    location: Optional[str] = None
    start_date: date


class FriendProfile(BaseModel):
    visitor_id: int
    first_name: str
    last_name: str
    full_name: str
    initials: str
    bio: Optional[str] = None
    image: Optional[str] = None
    my_upcoming_experiences: List[UpcomingExperience] = []


class ExperienceDetailOption(BaseModel):
    experience_detail_id: int
    date: dt.date
    time: Optional[str] = None
    price: Decimal
    status: str


# Calendar
class HandleInviteRequest(BaseModel):
    # free text so unknown actions get the domain message
    action: str


class PendingInvite(BaseModel):
    invitation_id: int
    experience_id: Optional[int] = None
    experience_title: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    price: Optional[Decimal] = None
    inviter_name: str
    inviter_avatar: str
    message: Optional[str] = None
    sent_at: Optional[datetime] = None


class AcceptedEvent(BaseModel):
    booking_id: int
    experience_id: Optional[int] = None
    experience_title: Optional[str] = None
    location: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    ticket_number: str
    price: str


class TicketReview(BaseModel):
    review_id: int
    rating: int
    comment: Optional[str] = None


class CalendarTicket(BaseModel):
    booking_id: int
    experience_id: Optional[int] = None
    experience_title: Optional[str] = None
    date: Optional[dt.date] = None
    status: str
    ticket_count: int
    total_amount: Decimal
    review: Optional[TicketReview] = None


class CalendarData(BaseModel):
    pending_invites: List[PendingInvite]
    accepted_events: List[AcceptedEvent]
    tickets: List[CalendarTicket]
    current_month: int
    current_year: int
