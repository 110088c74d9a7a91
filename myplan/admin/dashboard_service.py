import calendar
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from sqlalchemy import desc, extract, func
from sqlalchemy.orm import Session

from myplan.admin.schemas import (
    CategoryCount, DashboardData, GrowthMetric, MonthlyRevenue, RecentBooking
)
from myplan.auth.schemas import UserRole
from myplan.bookings.schemas import BookingStatus, PaymentStatus
from myplan.display import (
    booking_status_badge, category_color, category_icon, growth, growth_display
)
from myplan.models import Booking, Experience, Payment, User

RECENT_BOOKINGS_LIMIT = 10


def month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1)


def month_windows(now: datetime) -> Tuple[datetime, datetime, datetime]:
    """(previous month start, current month start, next month start)"""
    current = month_start(now.year, now.month)
    previous = month_start(now.year - 1, 12) if now.month == 1 else month_start(now.year, now.month - 1)
    following = month_start(now.year + 1, 1) if now.month == 12 else month_start(now.year, now.month + 1)
    return previous, current, following


def as_date(value: Any) -> Optional[date]:
    """func.date() yields strings on SQLite and dates on Postgres"""
    if value is None or isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    return date.fromisoformat(str(value)[:10])


def growth_metric(current, previous) -> GrowthMetric:
    value = round(growth(current, previous), 1)
    return GrowthMetric(value=value, **growth_display(value))


class DashboardService:
    """Headline admin metrics and month-over-month growth"""

    def __init__(self, db: Session):
        self.db = db

    # Aggregates shared with the report service
    def paid_revenue(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
            Payment.status == PaymentStatus.PAID.value
        )
        if start is not None:
            query = query.filter(Payment.payment_date >= start)
        if end is not None:
            query = query.filter(Payment.payment_date < end)
        return Decimal(str(query.scalar() or 0))

    def booking_count(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
        query = self.db.query(func.count(Booking.booking_id))
        if start is not None:
            query = query.filter(Booking.booking_date >= start)
        if end is not None:
            query = query.filter(Booking.booking_date < end)
        return query.scalar() or 0

    def visitor_count(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
        query = self.db.query(func.count(User.user_id)).filter(User.role == UserRole.VISITOR.value)
        if start is not None:
            query = query.filter(User.added_at >= start)
        if end is not None:
            query = query.filter(User.added_at < end)
        return query.scalar() or 0

    def growths(self, now: datetime) -> Tuple[GrowthMetric, GrowthMetric, GrowthMetric]:
        """Revenue, booking and user growth: this calendar month against the previous one"""
        previous, current, following = month_windows(now)
        return (
            growth_metric(self.paid_revenue(current, following), self.paid_revenue(previous, current)),
            growth_metric(self.booking_count(current, following), self.booking_count(previous, current)),
            growth_metric(self.visitor_count(current, following), self.visitor_count(previous, current)),
        )

    def monthly_revenue(self, year: Optional[int] = None, dense: bool = False) -> List[MonthlyRevenue]:
        """Paid revenue per month; ``dense`` back-fills Jan-Dec of ``year`` with zeros"""
        year_col = extract("year", Payment.payment_date)
        month_col = extract("month", Payment.payment_date)
        query = self.db.query(year_col, month_col, func.sum(Payment.amount)).filter(
            Payment.status == PaymentStatus.PAID.value,
            Payment.payment_date.isnot(None)
        )
        if year is not None:
            query = query.filter(year_col == year)
        rows = query.group_by(year_col, month_col).order_by(year_col, month_col).all()
        totals = {(int(y), int(m)): Decimal(str(total or 0)) for y, m, total in rows}

        if dense and year is not None:
            keys = [(year, m) for m in range(1, 13)]
        else:
            keys = sorted(totals)

        return [
            MonthlyRevenue(
                year=y,
                month=m,
                label=calendar.month_abbr[m],
                revenue=totals.get((y, m), Decimal("0")),
            )
            for y, m in keys
        ]

    def categories(self) -> List[CategoryCount]:
        rows = self.db.query(Experience.type, func.count(Experience.experience_id)) \
            .group_by(Experience.type).all()

        counts = {}
        for experience_type, count in rows:
            name = experience_type or "Other"
            counts[name] = counts.get(name, 0) + count

        return [
            CategoryCount(name=name, count=count, color=category_color(name), icon=category_icon(name))
            for name, count in sorted(counts.items(), key=lambda item: item[1], reverse=True)
        ]

    def recent_bookings(self, limit: int = RECENT_BOOKINGS_LIMIT) -> List[RecentBooking]:
        bookings = self.db.query(Booking).order_by(desc(Booking.booking_date)).limit(limit).all()
        return [
            RecentBooking(
                booking_id=b.booking_id,
                visitor_name=b.visitor.full_name if b.visitor else "Unknown",
                experience_title=b.experience.title if b.experience else None,
                total_amount=b.total_amount,
                status=b.status or "",
                status_badge=booking_status_badge(b.status),
                booking_date=b.booking_date,
            )
            for b in bookings
        ]

    def get_dashboard(self, now: Optional[datetime] = None) -> DashboardData:
        now = now or datetime.now()
        revenue_growth, booking_growth, user_growth = self.growths(now)

        return DashboardData(
            total_revenue=self.paid_revenue(),
            total_events=self.db.query(func.count(Experience.experience_id)).scalar() or 0,
            total_users=self.visitor_count(),
            active_bookings=self.db.query(func.count(Booking.booking_id)).filter(
                Booking.status == BookingStatus.CONFIRMED.value
            ).scalar() or 0,
            revenue_growth=revenue_growth,
            booking_growth=booking_growth,
            user_growth=user_growth,
            recent_bookings=self.recent_bookings(),
            monthly_revenue=self.monthly_revenue(year=now.year, dense=True),
            categories=self.categories(),
        )
