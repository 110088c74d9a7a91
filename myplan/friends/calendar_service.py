from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.bookings.schemas import BookingStatus
from myplan.config import settings
from myplan.display import format_time, initials
from myplan.exceptions import NotFoundError, PersistenceError, ValidationError
from myplan.friends.schemas import (
    AcceptedEvent, CalendarData, CalendarTicket, InvitationStatus, InviteAction, PendingInvite,
    TicketReview
)
from myplan.logging_config import get_logger
from myplan.models import Booking, FriendInvitation, Review, Visitor

logger = get_logger(__name__)


def _avatar(visitor: Optional[Visitor]) -> str:
    """Profile image path, or initials when the visitor has none"""
    if visitor is None:
        return "?"
    if visitor.user and visitor.user.image:
        return visitor.user.image
    return initials(visitor.first_name, visitor.last_name)


class CalendarService:
    """Visitor calendar: pending invitations, confirmed events and tickets"""

    def __init__(self, db: Session):
        self.db = db

    def get_calendar_data(self, me: Visitor, now: Optional[datetime] = None) -> CalendarData:
        now = now or datetime.now()

        invitations = self.db.query(FriendInvitation).filter(
            FriendInvitation.receiver_id == me.visitor_id,
            FriendInvitation.status == InvitationStatus.PENDING.value
        ).order_by(FriendInvitation.sent_at.desc()).all()

        bookings = self.db.query(Booking).filter(
            Booking.visitor_id == me.visitor_id
        ).order_by(Booking.booking_date.desc()).all()

        reviews = {
            r.booking_id: r for r in self.db.query(Review).filter(
                Review.visitor_id == me.visitor_id,
                Review.booking_id.isnot(None)
            ).all()
        }

        return CalendarData(
            pending_invites=[self._pending_invite(i) for i in invitations],
            accepted_events=[
                self._accepted_event(b) for b in bookings if b.status == BookingStatus.CONFIRMED.value
            ],
            tickets=[self._calendar_ticket(b, reviews.get(b.booking_id)) for b in bookings],
            current_month=now.month,
            current_year=now.year,
        )

    def handle_invite(self, me: Visitor, invitation_id: int, action: str) -> FriendInvitation:
        invitation = self.db.query(FriendInvitation).filter(
            FriendInvitation.invitation_id == invitation_id,
            FriendInvitation.receiver_id == me.visitor_id
        ).first()
        if not invitation:
            raise NotFoundError("Invitation not found.")

        normalized = (action or "").strip().lower()
        if normalized == InviteAction.ACCEPT.value:
            invitation.status = InvitationStatus.ACCEPTED.value
            invitation.accepted_at = datetime.now()
        elif normalized == InviteAction.DECLINE.value:
            invitation.status = InvitationStatus.REJECTED.value
        else:
            raise ValidationError("Invalid action.")

        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("invite_handle_failed", invitation_id=invitation_id)
            raise PersistenceError()

        self.db.refresh(invitation)
        logger.info("invite_handled", invitation_id=invitation_id, status=invitation.status)
        return invitation

    @staticmethod
    def _pending_invite(invitation: FriendInvitation) -> PendingInvite:
        detail = invitation.experience_detail
        experience = detail.experience if detail else None
        sender = invitation.sender
        return PendingInvite(
            invitation_id=invitation.invitation_id,
            experience_id=experience.experience_id if experience else None,
            experience_title=experience.title if experience else None,
            date=detail.date if detail else None,
            time=format_time(detail.time) if detail else None,
            price=detail.price if detail else None,
            inviter_name=sender.full_name if sender else "Unknown",
            inviter_avatar=_avatar(sender),
            message=invitation.message,
            sent_at=invitation.sent_at,
        )

    @staticmethod
    def _accepted_event(booking: Booking) -> AcceptedEvent:
        experience = booking.experience
        detail = booking.experience_detail
        return AcceptedEvent(
            booking_id=booking.booking_id,
            experience_id=booking.experience_id,
            experience_title=experience.title if experience else None,
            location=experience.location if experience else None,
            date=detail.date if detail else (experience.start_date if experience else None),
            time=format_time(detail.time) if detail else None,
            ticket_number=f"MP-{booking.booking_id}",
            price=f"{booking.total_amount} {settings.CURRENCY}",
        )

    @staticmethod
    def _calendar_ticket(booking: Booking, review: Optional[Review]) -> CalendarTicket:
        experience = booking.experience
        detail = booking.experience_detail
        return CalendarTicket(
            booking_id=booking.booking_id,
            experience_id=booking.experience_id,
            experience_title=experience.title if experience else None,
            date=detail.date if detail else (experience.start_date if experience else None),
            status=booking.status or "",
            ticket_count=len(booking.tickets),
            total_amount=booking.total_amount,
            review=TicketReview(review_id=review.review_id, rating=review.rating, comment=review.comment)
            if review else None,
        )
