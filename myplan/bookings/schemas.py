from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"
    FAILED = "Failed"


class PaymentMethod(str, Enum):
    CARD = "Card"
    PAYPAL = "PayPal"
    CASH = "Cash"


class TicketStatus(str, Enum):
    VALID = "Valid"
    USED = "Used"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"


# Requests
class BookingCreateRequest(BaseModel):
    experience_detail_id: int
    ticket_count: int = Field(..., ge=1, le=10)
    payment_method: PaymentMethod = PaymentMethod.CARD
    description: Optional[str] = Field(None, max_length=500)


class BookingStatusUpdate(BaseModel):
    # Left as a plain string so unknown values reach the service and get a domain error
    status: str


# Responses
class TicketInfo(BaseModel):
    ticket_id: int
    code: str
    status: str
    type: Optional[str] = None
    seat_number: Optional[str] = None
    issued_at: Optional[datetime] = None
    badge_class: str = ""

    class Config:
        from_attributes = True


class PaymentInfo(BaseModel):
    payment_id: int
    amount: Decimal
    method: str
    status: str
    payment_date: Optional[datetime] = None
    badge_class: str = ""
    method_icon: str = ""

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    booking_id: int
    experience_id: Optional[int] = None
    experience_detail_id: Optional[int] = None
    experience_title: Optional[str] = None
    experience_location: Optional[str] = None
    slot_date: Optional[date] = None
    slot_time: Optional[time] = None
    booking_date: Optional[datetime] = None
    number_of_ticket: int
    price_per_ticket: Decimal
    total_amount: Decimal
    status: str
    status_badge: str = ""
    payment_status: str = "N/A"
    tickets: List[TicketInfo] = []


class TicketDownload(BaseModel):
    booking_id: int
    ticket_code: str
    qr_code: str
    content_type: str = "image/png"


class TicketView(BaseModel):
    ticket: TicketInfo
    booking_id: int
    booking_status: str
    experience_title: Optional[str] = None
    experience_location: Optional[str] = None
    experience_start_date: Optional[date] = None
    visitor_name: Optional[str] = None
    qr_code: str


class CancellationResponse(BaseModel):
    booking_id: int
    status: str
    cancelled_tickets: int
    message: str = "Booking cancelled successfully!"
