"""
Tests for admin booking management, payment status, invoices and profile.
"""

from datetime import datetime
from decimal import Decimal

from myplan.admin.admin_service import AdminManagementService
from myplan.auth.utils import verify_password
from myplan.bookings.booking_service import BookingService
from myplan.bookings.schemas import BookingCreateRequest
from myplan.models import Invoice


def make_booking(db_session, visitor, slot, count=2):
    return BookingService(db_session).create_booking(
        visitor, BookingCreateRequest(experience_detail_id=slot.experience_detail_id, ticket_count=count)
    )


def test_list_bookings(client, db_session, admin_headers, visitor_user, slot):
    make_booking(db_session, visitor_user, slot)

    response = client.get("/api/v1/admin/bookings", headers=admin_headers)
    assert response.status_code == 200
    row = response.json()[0]
    assert row["visitor_name"] == "Sara Alqahtani"
    assert row["visitor_email"] == "sara@example.com"
    assert row["ticket_count"] == 2
    assert row["has_payment"] is True
    assert row["payment_status"] == "Pending"
    assert row["status_badge"] == "bg-warning"


def test_booking_details(client, db_session, admin_headers, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)

    response = client.get(f"/api/v1/admin/bookings/{booking.booking_id}", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["experience"]["title"] == "Desert Stargazing"
    assert len(data["tickets"]) == 2
    assert data["payment"]["method_icon"] == "bi-credit-card"


def test_booking_details_missing(client, admin_headers):
    response = client.get("/api/v1/admin/bookings/123", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Booking not found."


def test_update_booking_status(client, db_session, admin_headers, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)

    ok = client.post(f"/api/v1/admin/bookings/{booking.booking_id}/status", json={"status": "Confirmed"}, headers=admin_headers)
    assert ok.status_code == 200
    assert ok.json()["status"] == "Confirmed"

    bad = client.post(f"/api/v1/admin/bookings/{booking.booking_id}/status", json={"status": "Lost"}, headers=admin_headers)
    assert bad.status_code == 422
    assert bad.json()["detail"] == "Invalid booking status."
    db_session.refresh(booking)
    assert booking.status == "Confirmed"


def test_mark_payment_paid_issues_invoice(client, db_session, admin_headers, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)
    payment_id = booking.payments[0].payment_id

    response = client.post(f"/api/v1/admin/payments/{payment_id}/status", json={"status": "Paid"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "Paid"
    assert response.json()["payment_date"] is not None

    invoice = db_session.query(Invoice).filter(Invoice.payment_id == payment_id).one()
    assert invoice.total_amount == Decimal("200.00")
    assert invoice.tax_amount == Decimal("26.09")

    # paying again does not issue a second invoice
    client.post(f"/api/v1/admin/payments/{payment_id}/status", json={"status": "Paid"}, headers=admin_headers)
    assert db_session.query(Invoice).count() == 1

    details = client.get(f"/api/v1/admin/invoices/{invoice.invoice_id}", headers=admin_headers)
    assert details.status_code == 200
    data = details.json()
    assert data["booking_id"] == booking.booking_id
    assert data["visitor"]["full_name"] == "Sara Alqahtani"
    assert Decimal(data["subtotal"]) == Decimal("173.91")


def test_repeat_paid_keeps_original_payment_date(db_session, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)
    payment_id = booking.payments[0].payment_id
    service = AdminManagementService(db_session)

    service.update_payment_status(payment_id, "Paid", now=datetime(2026, 3, 10, 12, 0))
    payment = service.update_payment_status(payment_id, "Paid", now=datetime(2026, 5, 10, 12, 0))

    assert payment.payment_date == datetime(2026, 3, 10, 12, 0)
    invoice = db_session.query(Invoice).filter(Invoice.payment_id == payment_id).one()
    assert invoice.invoice_date == payment.payment_date


def test_invalid_payment_status(client, db_session, admin_headers, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)
    payment_id = booking.payments[0].payment_id

    response = client.post(f"/api/v1/admin/payments/{payment_id}/status", json={"status": "Refunded"}, headers=admin_headers)
    assert response.status_code == 422


def test_missing_invoice(client, admin_headers):
    assert client.get("/api/v1/admin/invoices/55", headers=admin_headers).status_code == 404


def test_admin_profile_update(client, db_session, admin_headers, admin_user):
    response = client.put(
        "/api/v1/admin/profile",
        data={"first_name": "Head", "last_name": "Admin", "email": "head@example.com", "position": "Lead"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["full_name"] == "Head Admin"
    assert data["email"] == "head@example.com"


def test_admin_profile_email_must_be_unique(client, admin_headers, visitor_user):
    response = client.put(
        "/api/v1/admin/profile",
        data={"first_name": "Site", "last_name": "Admin", "email": "sara@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["detail"] == "This email is already in use by another account."


def test_admin_password_change(client, db_session, admin_headers, admin_user):
    wrong = client.post(
        "/api/v1/admin/profile/password",
        json={"current_password": "nope", "new_password": "newpass1", "confirm_password": "newpass1"},
        headers=admin_headers,
    )
    assert wrong.status_code == 422

    ok = client.post(
        "/api/v1/admin/profile/password",
        json={"current_password": "admin123", "new_password": "newpass1", "confirm_password": "newpass1"},
        headers=admin_headers,
    )
    assert ok.status_code == 200
    db_session.refresh(admin_user.user)
    assert verify_password("newpass1", admin_user.user.password_hash)


def test_admin_delete_image_when_none(client, admin_headers):
    response = client.delete("/api/v1/admin/profile/image", headers=admin_headers)
    assert response.status_code == 404
