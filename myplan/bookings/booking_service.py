from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.bookings.schemas import (
    BookingCreateRequest, BookingResponse, BookingStatus, PaymentStatus
)
from myplan.bookings.ticket_service import TicketService
from myplan.display import booking_status_badge
from myplan.exceptions import NotFoundError, PersistenceError, PolicyViolation, ValidationError
from myplan.logging_config import get_logger
from myplan.models import Booking, Experience, ExperienceDetail, Payment, Visitor

logger = get_logger(__name__)

CANCELLATION_WINDOW = timedelta(hours=24)
VALID_BOOKING_STATUSES = {s.value for s in BookingStatus}


def cancellation_deadline(experience: Experience) -> datetime:
    """Last moment a booking for ``experience`` may still be cancelled"""
    return datetime.combine(experience.start_date, time.min) - CANCELLATION_WINDOW


class BookingService:
    """Booking lifecycle: creation, cancellation and admin status updates"""

    def __init__(self, db: Session):
        self.db = db
        self.ticket_service = TicketService(db)

    def create_booking(self, visitor: Visitor, request: BookingCreateRequest) -> Booking:
        detail = self.db.query(ExperienceDetail).filter(
            ExperienceDetail.experience_detail_id == request.experience_detail_id
        ).first()
        if not detail or detail.experience is None:
            raise NotFoundError("Experience slot not found.")
        if detail.status != "Active":
            raise ValidationError("This experience slot is not available for booking.")

        experience = detail.experience
        booked = self.db.query(func.coalesce(func.sum(Booking.number_of_ticket), 0)).filter(
            Booking.experience_id == experience.experience_id,
            Booking.status != BookingStatus.CANCELLED.value
        ).scalar()
        if booked + request.ticket_count > experience.max_capacity:
            raise ValidationError("Not enough capacity remaining for this experience.")

        price_per_ticket = Decimal(detail.price)
        total_amount = price_per_ticket * request.ticket_count

        booking = Booking(
            experience_id=experience.experience_id,
            experience_detail_id=detail.experience_detail_id,
            visitor_id=visitor.visitor_id,
            booking_date=datetime.now(),
            number_of_ticket=request.ticket_count,
            price_per_ticket=price_per_ticket,
            total_amount=total_amount,
            status=BookingStatus.PENDING.value,
            description=request.description,
        )
        try:
            self.db.add(booking)
            self.db.flush()

            self.ticket_service.issue_tickets(booking, request.ticket_count)
            self.db.add(Payment(
                booking_id=booking.booking_id,
                amount=total_amount,
                method=request.payment_method.value,
                status=PaymentStatus.PENDING.value,
            ))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("booking_create_failed", visitor_id=visitor.visitor_id)
            raise PersistenceError()

        self.db.refresh(booking)
        logger.info(
            "booking_created",
            booking_id=booking.booking_id,
            visitor_id=visitor.visitor_id,
            tickets=request.ticket_count,
            total_amount=str(total_amount),
        )
        return booking

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(Booking.booking_id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found.")
        return booking

    def get_owned_booking(self, booking_id: int, visitor: Visitor) -> Booking:
        booking = self.db.query(Booking).filter(
            Booking.booking_id == booking_id,
            Booking.visitor_id == visitor.visitor_id
        ).first()
        if not booking:
            raise NotFoundError("Booking not found.")
        return booking

    def list_visitor_bookings(self, visitor: Visitor) -> List[Booking]:
        return self.db.query(Booking).filter(
            Booking.visitor_id == visitor.visitor_id
        ).order_by(Booking.booking_date.desc()).all()

    def cancel_booking(self, booking_id: int, visitor: Visitor, now: Optional[datetime] = None) -> int:
        """Cancel an owned booking and all of its tickets; returns the cancelled ticket count"""
        booking = self.get_owned_booking(booking_id, visitor)
        now = now or datetime.now()

        if booking.experience is not None and now > cancellation_deadline(booking.experience):
            raise PolicyViolation("Cancellation is only allowed up to 24 hours before the event.")

        try:
            booking.status = BookingStatus.CANCELLED.value
            cancelled = self.ticket_service.cancel_tickets(booking)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("booking_cancel_failed", booking_id=booking_id)
            raise PersistenceError()

        logger.info("booking_cancelled", booking_id=booking_id, cancelled_tickets=cancelled)
        return cancelled

    def update_status(self, booking_id: int, new_status: str) -> Booking:
        """Admin status write; tickets and payments are left alone"""
        if new_status not in VALID_BOOKING_STATUSES:
            raise ValidationError("Invalid booking status.")

        booking = self.get_booking(booking_id)
        previous = booking.status
        try:
            booking.status = new_status
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("booking_status_update_failed", booking_id=booking_id)
            raise PersistenceError()

        logger.info("booking_status_updated", booking_id=booking_id, previous=previous, status=new_status)
        return booking

    @staticmethod
    def to_response(booking: Booking) -> BookingResponse:
        experience = booking.experience
        detail = booking.experience_detail
        payment = booking.payments[0] if booking.payments else None
        return BookingResponse(
            booking_id=booking.booking_id,
            experience_id=booking.experience_id,
            experience_detail_id=booking.experience_detail_id,
            experience_title=experience.title if experience else None,
            experience_location=experience.location if experience else None,
            slot_date=detail.date if detail else None,
            slot_time=detail.time if detail else None,
            booking_date=booking.booking_date,
            number_of_ticket=booking.number_of_ticket,
            price_per_ticket=booking.price_per_ticket,
            total_amount=booking.total_amount,
            status=booking.status or "",
            status_badge=booking_status_badge(booking.status),
            payment_status=payment.status if payment else "N/A",
            tickets=[TicketService.to_info(t) for t in booking.tickets],
        )
