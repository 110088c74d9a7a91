"""
Booking & Ticketing Module

Booking lifecycle for experience slots:

- Booking creation with ticket minting and a pending payment record
- Visitor cancellation, allowed until 24 hours before the experience starts,
  cascading to every ticket of the booking
- Admin status updates (Pending, Confirmed, Cancelled) without cascade
- QR code rendering for ticket download and public ticket lookup
- PDF ticket export

Key Components:
- booking_service.py: booking creation, cancellation, status updates
- ticket_service.py: ticket codes, QR codes and PDF rendering
- router.py: visitor booking endpoints and ticket endpoints
- schemas.py: status enums and request/response models
"""

from .router import router, ticket_router
from .booking_service import BookingService, cancellation_deadline
from .ticket_service import TicketService
from .schemas import (
    BookingStatus, PaymentStatus, PaymentMethod, TicketStatus,
    BookingCreateRequest, BookingStatusUpdate, BookingResponse,
    TicketInfo, PaymentInfo, TicketDownload, TicketView, CancellationResponse
)

__all__ = [
    "router",
    "ticket_router",
    "BookingService",
    "cancellation_deadline",
    "TicketService",
    "BookingStatus",
    "PaymentStatus",
    "PaymentMethod",
    "TicketStatus",
    "BookingCreateRequest",
    "BookingStatusUpdate",
    "BookingResponse",
    "TicketInfo",
    "PaymentInfo",
    "TicketDownload",
    "TicketView",
    "CancellationResponse",
]
