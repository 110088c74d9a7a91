"""
Friends & Calendar Module

- service.py: friend profiles, invitations to experience slots, slot listing
- calendar_service.py: a visitor's pending invites, confirmed events and
  tickets, plus accepting or declining invitations
"""

from .router import router, calendar_router
from .service import FriendService
from .calendar_service import CalendarService
from .schemas import (
    InvitationStatus, InviteAction, InviteRequest, InvitationResponse, FriendProfile,
    ExperienceDetailOption, HandleInviteRequest, CalendarData
)

__all__ = [
    "router",
    "calendar_router",
    "FriendService",
    "CalendarService",
    "InvitationStatus",
    "InviteAction",
    "InviteRequest",
    "InvitationResponse",
    "FriendProfile",
    "ExperienceDetailOption",
    "HandleInviteRequest",
    "CalendarData",
]
