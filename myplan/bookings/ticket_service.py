import base64
import secrets
from datetime import datetime
from io import BytesIO
from typing import List

import qrcode
from qrcode import constants
from sqlalchemy.orm import Session

from myplan.bookings.schemas import TicketDownload, TicketInfo, TicketStatus, TicketView
from myplan.display import ticket_status_badge
from myplan.exceptions import NotFoundError
from myplan.models import Booking, Ticket

TICKET_CODE_PREFIX = "MP-"


class TicketService:
    """Mints, cancels and renders booking tickets"""

    def __init__(self, db: Session):
        self.db = db

    def issue_tickets(self, booking: Booking, count: int, ticket_type: str = "Standard") -> List[Ticket]:
        """Add ``count`` tickets to the session for a flushed booking"""
        tickets = []
        for position in range(1, count + 1):
            ticket = Ticket(
                booking_id=booking.booking_id,
                code=self.generate_ticket_code(),
                seat_number=str(position),
                status=TicketStatus.VALID.value,
                type=ticket_type,
                issued_at=datetime.now(),
            )
            self.db.add(ticket)
            tickets.append(ticket)
        return tickets

    def cancel_tickets(self, booking: Booking) -> int:
        """Mark every ticket of a booking cancelled; the caller commits"""
        cancelled_count = 0
        for ticket in booking.tickets:
            if ticket.status != TicketStatus.CANCELLED.value:
                ticket.status = TicketStatus.CANCELLED.value
                cancelled_count += 1
        return cancelled_count

    def get_ticket_by_code(self, code: str) -> Ticket:
        ticket = self.db.query(Ticket).filter(Ticket.code == code).first()
        if not ticket:
            raise NotFoundError("Ticket not found.")
        return ticket

    def download(self, booking: Booking) -> TicketDownload:
        """QR for the first ticket of the booking, or the booking id when none were minted"""
        first_ticket = booking.tickets[0] if booking.tickets else None
        payload = first_ticket.code if first_ticket else str(booking.booking_id)
        return TicketDownload(
            booking_id=booking.booking_id,
            ticket_code=payload,
            qr_code=self.generate_qr_code_base64(payload),
        )

    def view(self, code: str) -> TicketView:
        ticket = self.get_ticket_by_code(code)
        booking = ticket.booking
        if booking is None:
            raise NotFoundError("Ticket not found.")

        experience = booking.experience
        return TicketView(
            ticket=self.to_info(ticket),
            booking_id=booking.booking_id,
            booking_status=booking.status,
            experience_title=experience.title if experience else None,
            experience_location=experience.location if experience else None,
            experience_start_date=experience.start_date if experience else None,
            visitor_name=booking.visitor.full_name if booking.visitor else None,
            qr_code=self.generate_qr_code_base64(ticket.code),
        )

    @staticmethod
    def to_info(ticket: Ticket) -> TicketInfo:
        info = TicketInfo.model_validate(ticket)
        info.badge_class = ticket_status_badge(ticket.status)
        return info

    @staticmethod
    def generate_ticket_code() -> str:
        return f"{TICKET_CODE_PREFIX}{secrets.token_hex(5).upper()}"

    @staticmethod
    def generate_qr_code_png(data: str) -> bytes:
        qr = qrcode.QRCode(
            version=1,
            error_correction=constants.ERROR_CORRECT_Q,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)

        qr_image = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        qr_image.save(buffer, format="PNG")
        return buffer.getvalue()

    @classmethod
    def generate_qr_code_base64(cls, data: str) -> str:
        return base64.b64encode(cls.generate_qr_code_png(data)).decode("ascii")

    def generate_pdf_ticket(self, booking: Booking) -> bytes:
        """Render every ticket of a booking into a printable PDF"""
        from reportlab.lib import colors
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.styles import getSampleStyleSheet
        from reportlab.platypus import Image as PDFImage
        from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

        if not booking.tickets:
            raise NotFoundError("No tickets found for booking")

        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4)
        styles = getSampleStyleSheet()
        story = [Paragraph("MyPlan", styles["Title"]), Spacer(1, 20)]

        experience = booking.experience
        for i, ticket in enumerate(booking.tickets):
            if i > 0:
                story.append(Spacer(1, 30))

            story.append(Paragraph(f"Ticket {ticket.code}", styles["Heading2"]))
            story.append(Spacer(1, 10))

            rows = [
                ["Experience:", experience.title if experience else "-"],
                ["Location:", (experience.location or "-") if experience else "-"],
                ["Date:", experience.start_date.strftime("%Y-%m-%d") if experience else "-"],
                ["Visitor:", booking.visitor.full_name if booking.visitor else "-"],
                ["Type:", ticket.type or "Standard"],
                ["Status:", ticket.status],
            ]
            table = Table(rows, colWidths=[100, 250])
            table.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, -1), colors.lightgrey),
                ("TEXTCOLOR", (0, 0), (-1, -1), colors.black),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]))
            story.append(table)
            story.append(Spacer(1, 10))
            story.append(PDFImage(BytesIO(self.generate_qr_code_png(ticket.code)), width=120, height=120))

        doc.build(story)
        return buffer.getvalue()
