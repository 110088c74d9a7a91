"""
Tests for ticket download, public view, PDF and cancellation endpoints.
"""

import base64
from datetime import date, timedelta

from myplan.bookings.booking_service import BookingService
from myplan.bookings.schemas import BookingCreateRequest
from myplan.bookings.ticket_service import TicketService

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def make_booking(db_session, visitor, slot, count=2):
    return BookingService(db_session).create_booking(
        visitor, BookingCreateRequest(experience_detail_id=slot.experience_detail_id, ticket_count=count)
    )


def test_ticket_code_format():
    code = TicketService.generate_ticket_code()
    assert code.startswith("MP-")
    assert len(code) == 13
    assert code == code.upper()


def test_qr_code_is_png():
    png = base64.b64decode(TicketService.generate_qr_code_base64("MP-ABCDEF1234"))
    assert png.startswith(PNG_SIGNATURE)


def test_tickets_numbered_within_booking(db_session, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot, count=3)
    assert sorted(t.seat_number for t in booking.tickets) == ["1", "2", "3"]
    assert {TicketService.to_info(t).seat_number for t in booking.tickets} == {"1", "2", "3"}


def test_download_returns_first_ticket_qr(client, db_session, auth_headers, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)

    response = client.get(f"/api/v1/tickets/{booking.booking_id}/download", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["ticket_code"] == booking.tickets[0].code
    assert base64.b64decode(data["qr_code"]).startswith(PNG_SIGNATURE)


def test_download_other_visitors_booking(client, db_session, other_headers, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)

    response = client.get(f"/api/v1/tickets/{booking.booking_id}/download", headers=other_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Booking not found."


def test_view_ticket_is_public(client, db_session, visitor_user, slot, experience):
    booking = make_booking(db_session, visitor_user, slot)
    code = booking.tickets[0].code

    response = client.get(f"/api/v1/tickets/view/{code}")
    assert response.status_code == 200
    data = response.json()
    assert data["ticket"]["code"] == code
    assert data["experience_title"] == experience.title
    assert data["visitor_name"] == "Sara Alqahtani"


def test_view_unknown_ticket(client):
    response = client.get("/api/v1/tickets/view/MP-NOPE")
    assert response.status_code == 404
    assert response.json()["detail"] == "Ticket not found."


def test_pdf_download(client, db_session, auth_headers, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)

    response = client.get(f"/api/v1/tickets/{booking.booking_id}/pdf", headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_cancel_endpoint(client, db_session, auth_headers, visitor_user, slot):
    booking = make_booking(db_session, visitor_user, slot)

    response = client.post(f"/api/v1/tickets/{booking.booking_id}/cancel", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {
        "booking_id": booking.booking_id,
        "status": "Cancelled",
        "cancelled_tickets": 2,
        "message": "Booking cancelled successfully!",
    }


def test_cancel_endpoint_too_late(client, db_session, auth_headers, visitor_user, slot, experience):
    experience.start_date = date.today()
    db_session.commit()
    booking = make_booking(db_session, visitor_user, slot)

    response = client.post(f"/api/v1/tickets/{booking.booking_id}/cancel", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["detail"] == "Cancellation is only allowed up to 24 hours before the event."
