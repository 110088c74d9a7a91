import uuid
from datetime import date
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.bookings.schemas import BookingStatus
from myplan.display import format_time, initials
from myplan.exceptions import NotFoundError, PersistenceError, ValidationError
from myplan.friends.schemas import (
    ExperienceDetailOption, FriendProfile, InvitationStatus, InviteRequest, UpcomingExperience
)
from myplan.logging_config import get_logger
from myplan.models import Booking, Experience, ExperienceDetail, FriendInvitation, Visitor

logger = get_logger(__name__)


class FriendService:
    """Friend profiles and experience invitations between visitors"""

    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, me: Visitor, friend_id: int) -> FriendProfile:
        friend = self.db.query(Visitor).filter(Visitor.visitor_id == friend_id).first()
        if not friend:
            raise NotFoundError("Friend not found.")

        today = date.today()
        upcoming = self.db.query(Booking).join(Experience, Booking.experience_id == Experience.experience_id).filter(
            Booking.visitor_id == me.visitor_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Experience.start_date >= today
        ).order_by(Experience.start_date).all()

        return FriendProfile(
            visitor_id=friend.visitor_id,
            first_name=friend.first_name,
            last_name=friend.last_name,
            full_name=friend.full_name,
            initials=initials(friend.first_name, friend.last_name),
            bio=friend.bio,
            image=friend.user.image if friend.user else None,
            my_upcoming_experiences=[
                UpcomingExperience(
                    booking_id=b.booking_id,
                    experience_id=b.experience.experience_id,
                    title=b.experience.title,
                    location=b.experience.location,
                    start_date=b.experience.start_date,
                )
                for b in upcoming
            ],
        )

    def invite(self, me: Visitor, request: InviteRequest) -> FriendInvitation:
        if request.friend_id == me.visitor_id:
            raise ValidationError("You cannot invite yourself.")

        friend = self.db.query(Visitor).filter(Visitor.visitor_id == request.friend_id).first()
        if not friend:
            raise NotFoundError("Friend not found.")

        detail = self.db.query(ExperienceDetail).filter(
            ExperienceDetail.experience_detail_id == request.experience_detail_id,
            ExperienceDetail.experience_id == request.experience_id
        ).first()
        if not detail:
            raise NotFoundError("Experience date not found.")

        invitation = FriendInvitation(
            visitor_id=me.visitor_id,
            receiver_id=friend.visitor_id,
            receiver_email=friend.user.email if friend.user else "",
            experience_detail_id=detail.experience_detail_id,
            message=request.message,
            status=InvitationStatus.PENDING.value,
            token=uuid.uuid4().hex,
        )
        try:
            self.db.add(invitation)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("friend_invite_failed", sender_id=me.visitor_id, receiver_id=friend.visitor_id)
            raise PersistenceError()

        self.db.refresh(invitation)
        logger.info("friend_invited", invitation_id=invitation.invitation_id, receiver_id=friend.visitor_id)
        return invitation

    def experience_details(self, experience_id: int) -> List[ExperienceDetailOption]:
        """Bookable slots of an experience from today on"""
        details = self.db.query(ExperienceDetail).filter(
            ExperienceDetail.experience_id == experience_id,
            ExperienceDetail.date >= date.today()
        ).order_by(ExperienceDetail.date, ExperienceDetail.time).all()

        return [
            ExperienceDetailOption(
                experience_detail_id=d.experience_detail_id,
                date=d.date,
                time=format_time(d.time),
                price=d.price,
                status=d.status,
            )
            for d in details
        ]
