import io
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from myplan.admin.dashboard_service import DashboardService, as_date
from myplan.admin.schemas import (
    ActivityItem, DailyCount, ExportFormat, GeneratedReport, ReportIndex, ReportRequest,
    ReportTotals, ReportType, StatusCount, TopExperience
)
from myplan.auth.schemas import UserRole
from myplan.bookings.schemas import PaymentStatus
from myplan.config import settings
from myplan.display import booking_status_badge, time_ago
from myplan.exceptions import ValidationError
from myplan.logging_config import get_logger
from myplan.models import Booking, Experience, Highlight, Payment, Review, User

logger = get_logger(__name__)

DEFAULT_REPORT_DAYS = 30
REGISTRATION_DAYS = 30
ACTIVITY_LIMIT = 5
TOP_EXPERIENCE_LIMIT = 5

EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """Half-open datetime range covering both ``start`` and ``end`` days"""
    return datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min)


def _sort_moment(item: ActivityItem) -> datetime:
    if item.occurred_at is None:
        return datetime.min
    return item.occurred_at.replace(tzinfo=None)


class ReportService(DashboardService):
    """Report index, custom range reports and their CSV/Excel export"""

    # Report index
    def index(self, now: Optional[datetime] = None) -> ReportIndex:
        now = now or datetime.now()
        revenue_growth, booking_growth, user_growth = self.growths(now)

        return ReportIndex(
            totals=ReportTotals(
                revenue=self.paid_revenue(),
                bookings=self.booking_count(),
                users=self.visitor_count(),
                experiences=self.db.query(func.count(Experience.experience_id)).scalar() or 0,
                reviews=self.db.query(func.count(Review.review_id)).scalar() or 0,
                highlights=self.db.query(func.count(Highlight.highlight_id)).scalar() or 0,
            ),
            revenue_growth=revenue_growth,
            booking_growth=booking_growth,
            user_growth=user_growth,
            monthly_revenue=self.monthly_revenue(year=now.year, dense=True),
            categories=self.categories(),
            booking_statuses=self.booking_statuses(),
            recent_activities=self.recent_activities(now),
            top_experiences=self.top_experiences(),
            user_registrations=self.user_registrations(now.date()),
        )

    def booking_statuses(self) -> List[StatusCount]:
        rows = self.db.query(Booking.status, func.count(Booking.booking_id)) \
            .group_by(Booking.status).all()

        counts: Dict[str, int] = {}
        for status, count in rows:
            name = status or "Unknown"
            counts[name] = counts.get(name, 0) + count

        return [
            StatusCount(status=name, count=count, badge_class=booking_status_badge(name))
            for name, count in counts.items()
        ]

    def recent_activities(self, now: datetime) -> List[ActivityItem]:
        activities = []

        bookings = self.db.query(Booking).order_by(desc(Booking.booking_date)).limit(ACTIVITY_LIMIT).all()
        for b in bookings:
            visitor_name = b.visitor.full_name if b.visitor else "Unknown"
            title = b.experience.title if b.experience else "an experience"
            activities.append(ActivityItem(
                type="booking",
                title="New Booking",
                description=f"{visitor_name} booked {title}",
                amount=b.total_amount,
                occurred_at=b.booking_date,
                icon="bi-calendar-check",
            ))

        payments = self.db.query(Payment).filter(
            Payment.status == PaymentStatus.PAID.value
        ).order_by(desc(Payment.payment_date)).limit(ACTIVITY_LIMIT).all()
        for p in payments:
            activities.append(ActivityItem(
                type="payment",
                title="Payment Received",
                description=f"Payment of {p.amount} {settings.CURRENCY} via {p.method}",
                amount=p.amount,
                occurred_at=p.payment_date or p.added_at,
                icon="bi-credit-card",
            ))

        activities.sort(key=_sort_moment, reverse=True)
        for item in activities:
            item.time_ago = time_ago(item.occurred_at, now=now)
        return activities[:ACTIVITY_LIMIT]

    def _paid_booking_ids(self):
        return select(Payment.booking_id).where(
            Payment.status == PaymentStatus.PAID.value,
            Payment.booking_id.isnot(None)
        )

    def top_experiences(self, limit: int = TOP_EXPERIENCE_LIMIT) -> List[TopExperience]:
        revenue = func.sum(Booking.total_amount)
        rows = self.db.query(
            Experience.experience_id, Experience.title, Experience.type,
            func.count(Booking.booking_id), revenue
        ).join(Booking, Booking.experience_id == Experience.experience_id) \
            .filter(Booking.booking_id.in_(self._paid_booking_ids())) \
            .group_by(Experience.experience_id, Experience.title, Experience.type) \
            .order_by(desc(revenue)) \
            .limit(limit).all()

        return [
            TopExperience(
                experience_id=experience_id,
                title=title,
                type=experience_type,
                bookings=bookings,
                revenue=Decimal(str(total or 0)),
            )
            for experience_id, title, experience_type, bookings, total in rows
        ]

    def user_registrations(self, today: date, days: int = REGISTRATION_DAYS) -> List[DailyCount]:
        """Visitor sign-ups per day, one entry for each of the last ``days`` days"""
        first_day = today - timedelta(days=days - 1)
        day_col = func.date(User.added_at)
        rows = self.db.query(day_col, func.count(User.user_id)).filter(
            User.role == UserRole.VISITOR.value,
            User.added_at >= datetime.combine(first_day, time.min)
        ).group_by(day_col).all()
        counts = {as_date(day): count for day, count in rows}

        return [
            DailyCount(date=first_day + timedelta(days=i), count=counts.get(first_day + timedelta(days=i), 0))
            for i in range(days)
        ]

    # Custom reports
    def generate(self, request: ReportRequest, today: Optional[date] = None) -> GeneratedReport:
        try:
            report_type = ReportType(request.report_type)
        except ValueError:
            raise ValidationError("Invalid report type.")

        today = today or date.today()
        end_date = request.end_date or today
        start_date = request.start_date or end_date - timedelta(days=DEFAULT_REPORT_DAYS)
        if start_date > end_date:
            raise ValidationError("End date must be after or equal to start date.")

        builder = {
            ReportType.REVENUE: self._revenue_report,
            ReportType.BOOKINGS: self._bookings_report,
            ReportType.USERS: self._users_report,
            ReportType.EXPERIENCES: self._experiences_report,
        }[report_type]
        rows, summary = builder(start_date, end_date)

        logger.info(
            "report_generated",
            report_type=report_type.value,
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            rows=len(rows),
        )
        return GeneratedReport(
            report_type=report_type,
            start_date=start_date,
            end_date=end_date,
            rows=rows,
            summary=summary,
        )

    def _revenue_report(self, start: date, end: date):
        lower, upper = _day_bounds(start, end)
        day_col = func.date(Payment.payment_date)
        rows = self.db.query(day_col, func.sum(Payment.amount), func.count(Payment.payment_id)).filter(
            Payment.status == PaymentStatus.PAID.value,
            Payment.payment_date >= lower,
            Payment.payment_date < upper
        ).group_by(day_col).order_by(day_col).all()

        daily = [
            {"date": as_date(day), "revenue": Decimal(str(total or 0)), "transactions": count}
            for day, total, count in rows
        ]
        total_revenue = sum((d["revenue"] for d in daily), Decimal("0"))
        return daily, {
            "total_revenue": total_revenue,
            "average_revenue": (total_revenue / len(daily)).quantize(Decimal("0.01")) if daily else Decimal("0"),
            "total_transactions": sum(d["transactions"] for d in daily),
        }

    def _bookings_report(self, start: date, end: date):
        lower, upper = _day_bounds(start, end)
        day_col = func.date(Booking.booking_date)
        rows = self.db.query(
            day_col,
            func.count(Booking.booking_id),
            func.sum(Booking.total_amount),
            func.sum(Booking.number_of_ticket)
        ).filter(
            Booking.booking_date >= lower,
            Booking.booking_date < upper
        ).group_by(day_col).order_by(day_col).all()

        daily = [
            {
                "date": as_date(day),
                "bookings": count,
                "revenue": Decimal(str(revenue or 0)),
                "tickets": int(tickets or 0),
            }
            for day, count, revenue, tickets in rows
        ]
        total_bookings = sum(d["bookings"] for d in daily)
        return daily, {
            "total_bookings": total_bookings,
            "total_revenue": sum((d["revenue"] for d in daily), Decimal("0")),
            "total_tickets": sum(d["tickets"] for d in daily),
            "average_bookings_per_day": round(total_bookings / len(daily), 2) if daily else 0,
        }

    def _users_report(self, start: date, end: date):
        lower, upper = _day_bounds(start, end)
        day_col = func.date(User.added_at)
        rows = self.db.query(day_col, func.count(User.user_id)).filter(
            User.role == UserRole.VISITOR.value,
            User.added_at >= lower,
            User.added_at < upper
        ).group_by(day_col).order_by(day_col).all()

        daily = [{"date": as_date(day), "users": count} for day, count in rows]
        total_users = sum(d["users"] for d in daily)
        return daily, {
            "total_users": total_users,
            "average_users_per_day": round(total_users / len(daily), 2) if daily else 0,
        }

    def _experiences_report(self, start: date, end: date):
        lower, upper = _day_bounds(start, end)
        experiences = self.db.query(Experience).filter(
            Experience.added_at >= lower,
            Experience.added_at < upper
        ).all()
        paid_ids = self._paid_booking_ids()

        rows = []
        for e in experiences:
            bookings = self.db.query(func.count(Booking.booking_id)).filter(
                Booking.experience_id == e.experience_id
            ).scalar() or 0
            review_count, average_rating = self.db.query(
                func.count(Review.review_id), func.avg(Review.rating)
            ).filter(Review.experience_id == e.experience_id).one()
            revenue = self.db.query(func.coalesce(func.sum(Booking.total_amount), 0)).filter(
                Booking.experience_id == e.experience_id,
                Booking.booking_id.in_(paid_ids)
            ).scalar()
            rows.append({
                "experience_id": e.experience_id,
                "title": e.title,
                "type": e.type or "Other",
                "bookings": bookings,
                "reviews": review_count or 0,
                "average_rating": round(float(average_rating), 1) if average_rating is not None else 0.0,
                "revenue": Decimal(str(revenue or 0)),
            })

        rows.sort(key=lambda row: row["revenue"], reverse=True)
        return rows, {
            "total_experiences": len(rows),
            "total_bookings": sum(r["bookings"] for r in rows),
            "total_revenue": sum((r["revenue"] for r in rows), Decimal("0")),
        }

    # Export
    def export(self, request: ReportRequest, format: ExportFormat) -> Tuple[io.BytesIO, str, str]:
        """Render a generated report as CSV or Excel; returns (stream, media type, filename)"""
        report = self.generate(request)
        df = pd.DataFrame(report.rows)
        stem = f"{report.report_type.value}_report_{report.start_date:%Y%m%d}_{report.end_date:%Y%m%d}"

        if format == ExportFormat.CSV:
            output = io.StringIO()
            df.to_csv(output, index=False)
            return io.BytesIO(output.getvalue().encode()), "text/csv", f"{stem}.csv"

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=report.report_type.value.title(), index=False)
        output.seek(0)
        return output, EXCEL_MEDIA_TYPE, f"{stem}.xlsx"
