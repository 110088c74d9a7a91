"""
Tests for booking creation, cancellation window and admin status updates.
"""

from datetime import datetime, time, timedelta
from decimal import Decimal

import pytest

from myplan.admin.dashboard_service import DashboardService
from myplan.bookings.booking_service import BookingService, cancellation_deadline
from myplan.bookings.schemas import BookingCreateRequest
from myplan.exceptions import NotFoundError, PolicyViolation, ValidationError


def book(db_session, visitor, slot, count=3):
    return BookingService(db_session).create_booking(
        visitor, BookingCreateRequest(experience_detail_id=slot.experience_detail_id, ticket_count=count)
    )


def test_create_booking_totals_and_tickets(db_session, visitor_user, slot):
    """Three tickets at 100 make a pending 300 booking with a pending payment."""
    booking = book(db_session, visitor_user, slot)

    assert booking.total_amount == Decimal("300.00")
    assert booking.status == "Pending"
    assert len(booking.tickets) == 3
    assert all(t.status == "Valid" for t in booking.tickets)
    assert len({t.code for t in booking.tickets}) == 3
    assert booking.payments[0].status == "Pending"
    assert booking.payments[0].amount == Decimal("300.00")


def test_create_booking_unknown_slot(db_session, visitor_user):
    with pytest.raises(NotFoundError):
        BookingService(db_session).create_booking(
            visitor_user, BookingCreateRequest(experience_detail_id=999, ticket_count=1)
        )


def test_create_booking_over_capacity(db_session, visitor_user, slot):
    """Capacity counts tickets of bookings that are not cancelled."""
    book(db_session, visitor_user, slot, count=10)
    book(db_session, visitor_user, slot, count=10)

    with pytest.raises(ValidationError):
        book(db_session, visitor_user, slot, count=1)


def test_cancel_inside_window_rejected(db_session, visitor_user, slot, experience):
    booking = book(db_session, visitor_user, slot)
    start = datetime.combine(experience.start_date, time.min)

    with pytest.raises(PolicyViolation):
        BookingService(db_session).cancel_booking(
            booking.booking_id, visitor_user, now=start - timedelta(hours=23)
        )

    db_session.refresh(booking)
    assert booking.status == "Pending"
    assert all(t.status == "Valid" for t in booking.tickets)


def test_cancel_outside_window_cascades(db_session, visitor_user, slot, experience):
    booking = book(db_session, visitor_user, slot)
    start = datetime.combine(experience.start_date, time.min)

    cancelled = BookingService(db_session).cancel_booking(
        booking.booking_id, visitor_user, now=start - timedelta(hours=25)
    )

    db_session.refresh(booking)
    assert cancelled == 3
    assert booking.status == "Cancelled"
    assert all(t.status == "Cancelled" for t in booking.tickets)
    # payment is left as it was
    assert booking.payments[0].status == "Pending"


def test_cancel_keeps_paid_payment_in_revenue(db_session, visitor_user, slot, experience):
    booking = book(db_session, visitor_user, slot)
    payment = booking.payments[0]
    payment.status = "Paid"
    payment.payment_date = datetime.now()
    db_session.commit()

    start = datetime.combine(experience.start_date, time.min)
    BookingService(db_session).cancel_booking(booking.booking_id, visitor_user, now=start - timedelta(hours=25))

    db_session.refresh(payment)
    assert booking.status == "Cancelled"
    assert payment.status == "Paid"
    assert DashboardService(db_session).paid_revenue() == Decimal("300.00")


def test_cancel_exactly_at_deadline_allowed(db_session, visitor_user, slot, experience):
    booking = book(db_session, visitor_user, slot, count=1)

    BookingService(db_session).cancel_booking(
        booking.booking_id, visitor_user, now=cancellation_deadline(experience)
    )
    assert booking.status == "Cancelled"


def test_cancel_someone_elses_booking(db_session, visitor_user, other_visitor, slot):
    booking = book(db_session, visitor_user, slot)

    with pytest.raises(NotFoundError):
        BookingService(db_session).cancel_booking(booking.booking_id, other_visitor)


def test_update_status_invalid_leaves_booking_unchanged(db_session, visitor_user, slot):
    booking = book(db_session, visitor_user, slot)

    with pytest.raises(ValidationError):
        BookingService(db_session).update_status(booking.booking_id, "Archived")

    db_session.refresh(booking)
    assert booking.status == "Pending"


def test_update_status_confirmed(db_session, visitor_user, slot):
    booking = book(db_session, visitor_user, slot)

    BookingService(db_session).update_status(booking.booking_id, "Confirmed")
    assert booking.status == "Confirmed"


def test_booking_endpoints(client, auth_headers, slot):
    response = client.post(
        "/api/v1/bookings",
        json={"experience_detail_id": slot.experience_detail_id, "ticket_count": 2, "payment_method": "Card"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert Decimal(data["total_amount"]) == Decimal("200.00")
    assert len(data["tickets"]) == 2
    assert data["payment_status"] == "Pending"

    listing = client.get("/api/v1/bookings", headers=auth_headers)
    assert listing.status_code == 200
    assert [b["booking_id"] for b in listing.json()] == [data["booking_id"]]


def test_booking_requires_login(client, slot):
    response = client.post(
        "/api/v1/bookings",
        json={"experience_detail_id": slot.experience_detail_id, "ticket_count": 1},
    )
    assert response.status_code == 401


def test_booking_ticket_count_limit(client, auth_headers, slot):
    response = client.post(
        "/api/v1/bookings",
        json={"experience_detail_id": slot.experience_detail_id, "ticket_count": 11},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_admin_cannot_book(client, admin_headers, slot):
    response = client.post(
        "/api/v1/bookings",
        json={"experience_detail_id": slot.experience_detail_id, "ticket_count": 1},
        headers=admin_headers,
    )
    assert response.status_code == 403
