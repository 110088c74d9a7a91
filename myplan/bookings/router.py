from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from myplan.auth.dependencies import get_current_visitor
from myplan.bookings.booking_service import BookingService
from myplan.bookings.schemas import (
    BookingCreateRequest, BookingResponse, BookingStatus, CancellationResponse,
    TicketDownload, TicketView
)
from myplan.bookings.ticket_service import TicketService
from myplan.database import get_db
from myplan.models import Visitor

router = APIRouter()
ticket_router = APIRouter()


# Booking Endpoints
@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreateRequest,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    """Book tickets for an experience slot"""
    booking_service = BookingService(db)
    booking = booking_service.create_booking(visitor, request)
    return booking_service.to_response(booking)


@router.get("", response_model=List[BookingResponse])
def list_my_bookings(
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    """List the caller's bookings, newest first"""
    booking_service = BookingService(db)
    return [booking_service.to_response(b) for b in booking_service.list_visitor_bookings(visitor)]


# Ticket Endpoints
@ticket_router.get("/view/{code}", response_model=TicketView)
def view_ticket(code: str, db: Session = Depends(get_db)):
    """Public ticket lookup by code, e.g. from a scanned QR"""
    return TicketService(db).view(code)


@ticket_router.get("/{booking_id}/download", response_model=TicketDownload)
def download_ticket(
    booking_id: int,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    """QR code of the booking's ticket as a base64 PNG"""
    booking = BookingService(db).get_owned_booking(booking_id, visitor)
    return TicketService(db).download(booking)


@ticket_router.get("/{booking_id}/pdf")
def download_ticket_pdf(
    booking_id: int,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    booking = BookingService(db).get_owned_booking(booking_id, visitor)
    pdf = TicketService(db).generate_pdf_ticket(booking)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=tickets_{booking_id}.pdf"}
    )


@ticket_router.post("/{booking_id}/cancel", response_model=CancellationResponse)
def cancel_booking(
    booking_id: int,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    """Cancel a booking up to 24 hours before the experience starts"""
    cancelled = BookingService(db).cancel_booking(booking_id, visitor)
    return CancellationResponse(
        booking_id=booking_id,
        status=BookingStatus.CANCELLED.value,
        cancelled_tickets=cancelled
    )
