from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from myplan.auth.dependencies import get_current_visitor
from myplan.database import get_db
from myplan.friends.calendar_service import CalendarService
from myplan.friends.schemas import (
    CalendarData, ExperienceDetailOption, FriendProfile, HandleInviteRequest,
    InvitationResponse, InviteRequest
)
from myplan.friends.service import FriendService
from myplan.models import Visitor

router = APIRouter()
calendar_router = APIRouter()


# Friend Endpoints
@router.post("/invite", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
def invite_friend(
    request: InviteRequest,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    """Invite a friend to join an experience slot"""
    return FriendService(db).invite(visitor, request)


@router.get("/experience-details/{experience_id}", response_model=List[ExperienceDetailOption])
def get_experience_details(
    experience_id: int,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    return FriendService(db).experience_details(experience_id)


@router.get("/{friend_id}", response_model=FriendProfile)
def friend_profile(
    friend_id: int,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    return FriendService(db).get_profile(visitor, friend_id)


# Calendar Endpoints
@calendar_router.get("", response_model=CalendarData)
def get_calendar_data(visitor: Visitor = Depends(get_current_visitor), db: Session = Depends(get_db)):
    """Pending invites, confirmed events and tickets for the calendar view"""
    return CalendarService(db).get_calendar_data(visitor)


@calendar_router.post("/invites/{invitation_id}", response_model=InvitationResponse)
def handle_invite(
    invitation_id: int,
    request: HandleInviteRequest,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    """Accept or decline an invitation"""
    return CalendarService(db).handle_invite(visitor, invitation_id, request.action)
