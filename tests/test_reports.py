"""
Tests for the admin dashboard, report index, generated reports and export.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from myplan.admin.dashboard_service import DashboardService, month_windows
from myplan.admin.report_service import ReportService
from myplan.admin.schemas import ReportRequest
from myplan.bookings.booking_service import BookingService
from myplan.bookings.schemas import BookingCreateRequest
from myplan.exceptions import ValidationError
from myplan.models import Payment


@pytest.fixture
def paid_booking(db_session, visitor_user, slot):
    """A confirmed three-ticket booking paid today."""
    service = BookingService(db_session)
    booking = service.create_booking(
        visitor_user, BookingCreateRequest(experience_detail_id=slot.experience_detail_id, ticket_count=3)
    )
    service.update_status(booking.booking_id, "Confirmed")
    payment = booking.payments[0]
    payment.status = "Paid"
    payment.payment_date = datetime.now()
    db_session.commit()
    return booking


def test_month_windows_wrap_year():
    previous, current, following = month_windows(datetime(2025, 1, 15))
    assert previous == datetime(2024, 12, 1)
    assert current == datetime(2025, 1, 1)
    assert following == datetime(2025, 2, 1)


def test_dashboard_totals(client, admin_headers, paid_booking):
    response = client.get("/api/v1/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["total_revenue"]) == Decimal("300.00")
    assert data["total_events"] == 1
    assert data["total_users"] == 1
    assert data["active_bookings"] == 1
    assert data["recent_bookings"][0]["visitor_name"] == "Sara Alqahtani"
    assert data["categories"][0]["name"] == "Cultural"


def test_dashboard_trend_covers_current_year(db_session, paid_booking):
    db_session.add(Payment(
        booking_id=paid_booking.booking_id,
        amount=Decimal("50.00"),
        method="Card",
        status="Paid",
        payment_date=datetime(date.today().year - 1, 6, 1),
    ))
    db_session.commit()

    trend = DashboardService(db_session).get_dashboard().monthly_revenue
    assert [(m.year, m.month) for m in trend] == [(date.today().year, m) for m in range(1, 13)]
    assert trend[date.today().month - 1].revenue == Decimal("300.00")
    assert sum(m.revenue for m in trend) == Decimal("300.00")


def test_revenue_growth_from_empty_previous_month(db_session, paid_booking):
    revenue_growth, _, _ = DashboardService(db_session).growths(datetime.now())
    assert revenue_growth.value == 100.0
    assert revenue_growth.text == "+100.0%"


def test_revenue_growth_against_previous_month(db_session, paid_booking):
    previous_start, current_start, _ = month_windows(datetime.now())
    db_session.add(Payment(
        booking_id=paid_booking.booking_id,
        amount=Decimal("600.00"),
        method="Card",
        status="Paid",
        payment_date=previous_start + timedelta(days=2),
    ))
    db_session.commit()

    revenue_growth, _, _ = DashboardService(db_session).growths(datetime.now())
    assert revenue_growth.value == -50.0
    assert revenue_growth.css_class == "text-danger"


def test_uncategorised_experiences_grouped_as_other(db_session, experience):
    experience.type = None
    db_session.commit()

    categories = DashboardService(db_session).categories()
    assert [(c.name, c.count) for c in categories] == [("Other", 1)]


def test_report_index_backfills_twelve_months(client, admin_headers, paid_booking):
    response = client.get("/api/v1/admin/reports", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()

    months = data["monthly_revenue"]
    assert [m["month"] for m in months] == list(range(1, 13))
    this_month = months[date.today().month - 1]
    assert Decimal(this_month["revenue"]) == Decimal("300.00")
    assert sum(Decimal(m["revenue"]) for m in months) == Decimal("300.00")

    assert len(data["user_registrations"]) == 30
    assert data["top_experiences"][0]["title"] == "Desert Stargazing"
    assert Decimal(data["top_experiences"][0]["revenue"]) == Decimal("300.00")
    assert {s["status"] for s in data["booking_statuses"]} == {"Confirmed"}
    assert data["totals"]["reviews"] == 0


def test_recent_activities_merge_bookings_and_payments(db_session, paid_booking):
    activities = ReportService(db_session).recent_activities(datetime.now())
    assert {a.type for a in activities} == {"booking", "payment"}
    assert len(activities) <= 5


def test_user_registrations_are_dense(db_session, visitor_user):
    visitor_user.user.added_at = datetime.now()
    db_session.commit()

    series = ReportService(db_session).user_registrations(date.today())
    assert len(series) == 30
    assert series[-1].date == date.today()
    assert series[-1].count == 1
    assert sum(day.count for day in series) == 1


def test_generate_invalid_report_type(db_session):
    with pytest.raises(ValidationError):
        ReportService(db_session).generate(ReportRequest(report_type="weather"))


def test_generate_invalid_report_type_endpoint(client, admin_headers):
    response = client.post("/api/v1/admin/reports/generate", json={"report_type": "weather"}, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["detail"] == "Invalid report type."


def test_generate_revenue_report(db_session, paid_booking):
    report = ReportService(db_session).generate(ReportRequest(report_type="revenue"))
    assert report.start_date == date.today() - timedelta(days=30)
    assert report.rows == [{"date": date.today(), "revenue": Decimal("300.00"), "transactions": 1}]
    assert report.summary["total_revenue"] == Decimal("300.00")
    assert report.summary["average_revenue"] == Decimal("300.00")


def test_generate_bookings_report(db_session, paid_booking):
    report = ReportService(db_session).generate(ReportRequest(report_type="bookings"))
    assert report.rows[0]["bookings"] == 1
    assert report.rows[0]["tickets"] == 3
    assert report.summary["total_tickets"] == 3


def test_generate_experiences_report(db_session, experience, paid_booking):
    experience.added_at = datetime.now()
    db_session.commit()

    report = ReportService(db_session).generate(ReportRequest(report_type="experiences"))
    assert report.rows[0]["title"] == "Desert Stargazing"
    assert report.rows[0]["revenue"] == Decimal("300.00")
    assert report.rows[0]["bookings"] == 1


def test_generate_range_outside_data(db_session, paid_booking):
    request = ReportRequest(report_type="revenue", start_date=date(2020, 1, 1), end_date=date(2020, 1, 31))
    report = ReportService(db_session).generate(request)
    assert report.rows == []
    assert report.summary["average_revenue"] == Decimal("0")


def test_export_csv(client, admin_headers, paid_booking):
    response = client.get(
        "/api/v1/admin/reports/export", params={"report_type": "revenue", "format": "csv"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=revenue_report_" in response.headers["content-disposition"]
    assert response.text.splitlines()[0] == "date,revenue,transactions"


def test_export_excel(client, admin_headers, paid_booking):
    response = client.get(
        "/api/v1/admin/reports/export", params={"report_type": "bookings", "format": "excel"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.content[:2] == b"PK"
