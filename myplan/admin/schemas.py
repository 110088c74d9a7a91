import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, validator

from myplan.auth.schemas import PHONE_PATTERN
from myplan.bookings.schemas import BookingResponse, PaymentInfo, TicketInfo


class ReportType(str, Enum):
    REVENUE = "revenue"
    BOOKINGS = "bookings"
    USERS = "users"
    EXPERIENCES = "experiences"


class ExportFormat(str, Enum):
    CSV = "csv"
    EXCEL = "excel"


# Shared pieces
class GrowthMetric(BaseModel):
    value: float
    text: str
    css_class: str
    icon: str


class MonthlyRevenue(BaseModel):
    year: int
    month: int
    label: str
    revenue: Decimal


class CategoryCount(BaseModel):
    name: str
    count: int
    color: str = ""
    icon: str = ""


class StatusCount(BaseModel):
    status: str
    count: int
    badge_class: str = ""


class RecentBooking(BaseModel):
    booking_id: int
    visitor_name: str
    experience_title: Optional[str] = None
    total_amount: Decimal
    status: str
    status_badge: str
    booking_date: Optional[datetime] = None


# Dashboard
class DashboardData(BaseModel):
    total_revenue: Decimal
    total_events: int
    total_users: int
    active_bookings: int
    revenue_growth: GrowthMetric
    booking_growth: GrowthMetric
    user_growth: GrowthMetric
    recent_bookings: List[RecentBooking]
    monthly_revenue: List[MonthlyRevenue]
    categories: List[CategoryCount]


# Reports
class ActivityItem(BaseModel):
    type: str
    title: str
    description: str
    amount: Optional[Decimal] = None
    occurred_at: Optional[datetime] = None
    time_ago: str = ""
    icon: str = ""


class TopExperience(BaseModel):
    experience_id: int
    title: str
    type: Optional[str] = None
    bookings: int
    revenue: Decimal


class DailyCount(BaseModel):
    date: dt.date
    count: int


class ReportTotals(BaseModel):
    revenue: Decimal
    bookings: int
    users: int
    experiences: int
    reviews: int
    highlights: int


class ReportIndex(BaseModel):
    totals: ReportTotals
    revenue_growth: GrowthMetric
    booking_growth: GrowthMetric
    user_growth: GrowthMetric
    monthly_revenue: List[MonthlyRevenue]
    categories: List[CategoryCount]
    booking_statuses: List[StatusCount]
    recent_activities: List[ActivityItem]
    top_experiences: List[TopExperience]
    user_registrations: List[DailyCount]


class ReportRequest(BaseModel):
    # plain string so an unknown type reaches the service and gets a domain error
    report_type: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @validator("end_date")
    def end_not_before_start(cls, v, values):
        start = values.get("start_date")
        if v and start and v < start:
            raise ValueError("End date must be after or equal to start date.")
        return v


class GeneratedReport(BaseModel):
    report_type: ReportType
    start_date: date
    end_date: date
    rows: List[Dict[str, Any]]
    summary: Dict[str, Any]


# Admin bookings
class AdminBookingRow(BaseModel):
    booking_id: int
    visitor_name: str
    visitor_email: Optional[str] = None
    experience_title: Optional[str] = None
    experience_location: Optional[str] = None
    booking_date: Optional[datetime] = None
    number_of_ticket: int
    total_amount: Decimal
    status: str
    status_badge: str
    ticket_count: int
    has_payment: bool
    payment_status: str
    payment_badge: str
    added_at: Optional[datetime] = None


class VisitorSummary(BaseModel):
    visitor_id: int
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class ExperienceBrief(BaseModel):
    experience_id: int
    title: str
    type: Optional[str] = None
    location: Optional[str] = None
    start_date: date
    end_date: date


class AdminBookingDetails(BaseModel):
    booking: BookingResponse
    visitor: Optional[VisitorSummary] = None
    experience: Optional[ExperienceBrief] = None
    tickets: List[TicketInfo]
    payment: Optional[PaymentInfo] = None


class InvoiceDetails(BaseModel):
    invoice_id: int
    invoice_date: Optional[datetime] = None
    visitor_address: Optional[str] = None
    total_amount: Decimal
    tax_amount: Decimal
    subtotal: Decimal
    payment: Optional[PaymentInfo] = None
    booking_id: Optional[int] = None
    visitor: Optional[VisitorSummary] = None
    experience: Optional[ExperienceBrief] = None


class PaymentStatusUpdate(BaseModel):
    status: str


# Admin profile
class AdminProfile(BaseModel):
    admin_id: int
    user_id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    position: Optional[str] = None
    image: Optional[str] = None


class AdminProfileUpdate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    position: Optional[str] = Field(None, max_length=100)


class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=100)
    confirm_password: str

    @validator("confirm_password")
    def passwords_match(cls, v, values):
        if "new_password" in values and v != values["new_password"]:
            raise ValueError("The new password and confirmation password do not match.")
        return v
