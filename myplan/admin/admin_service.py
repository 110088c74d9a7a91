from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.admin.schemas import (
    AdminBookingDetails, AdminBookingRow, AdminProfile, AdminProfileUpdate, ExperienceBrief,
    InvoiceDetails, PasswordUpdate, VisitorSummary
)
from myplan.auth.utils import get_password_hash, verify_password
from myplan.bookings.booking_service import BookingService
from myplan.bookings.schemas import PaymentInfo, PaymentStatus
from myplan.bookings.ticket_service import TicketService
from myplan.config import settings
from myplan.display import booking_status_badge, payment_method_icon, payment_status_badge
from myplan.exceptions import NotFoundError, PersistenceError, ValidationError
from myplan.logging_config import get_logger
from myplan.models import Admin, Booking, Experience, Invoice, Payment, User, Visitor
from myplan.storage import FileStorageService

logger = get_logger(__name__)

VALID_PAYMENT_STATUSES = {s.value for s in PaymentStatus}
PROFILE_IMAGE_FOLDER = "profiles"


def payment_info(payment: Payment) -> PaymentInfo:
    return PaymentInfo(
        payment_id=payment.payment_id,
        amount=payment.amount,
        method=payment.method,
        status=payment.status,
        payment_date=payment.payment_date,
        badge_class=payment_status_badge(payment.status),
        method_icon=payment_method_icon(payment.method),
    )


def visitor_summary(visitor: Optional[Visitor]) -> Optional[VisitorSummary]:
    if visitor is None:
        return None
    return VisitorSummary(
        visitor_id=visitor.visitor_id,
        full_name=visitor.full_name,
        email=visitor.user.email if visitor.user else None,
        phone=visitor.phone,
    )


def experience_brief(experience: Optional[Experience]) -> Optional[ExperienceBrief]:
    if experience is None:
        return None
    return ExperienceBrief(
        experience_id=experience.experience_id,
        title=experience.title,
        type=experience.type,
        location=experience.location,
        start_date=experience.start_date,
        end_date=experience.end_date,
    )


def split_tax(total: Decimal, rate: Decimal) -> Decimal:
    """Tax portion of a tax-inclusive total"""
    return (total - total / (1 + rate)).quantize(Decimal("0.01"))


class AdminManagementService:
    """Admin back office: bookings, payments, invoices and the admin's own profile"""

    def __init__(self, db: Session, storage: Optional[FileStorageService] = None):
        self.db = db
        self.storage = storage or FileStorageService()
        self.booking_service = BookingService(db)

    # Bookings
    def list_bookings(self) -> List[AdminBookingRow]:
        bookings = self.db.query(Booking).order_by(desc(Booking.added_at), desc(Booking.booking_id)).all()

        rows = []
        for b in bookings:
            visitor = b.visitor
            payment = b.payments[0] if b.payments else None
            payment_status = payment.status if payment else "N/A"
            rows.append(AdminBookingRow(
                booking_id=b.booking_id,
                visitor_name=visitor.full_name if visitor else "Unknown",
                visitor_email=visitor.user.email if visitor and visitor.user else None,
                experience_title=b.experience.title if b.experience else None,
                experience_location=b.experience.location if b.experience else None,
                booking_date=b.booking_date,
                number_of_ticket=b.number_of_ticket,
                total_amount=b.total_amount,
                status=b.status or "",
                status_badge=booking_status_badge(b.status),
                ticket_count=len(b.tickets),
                has_payment=payment is not None,
                payment_status=payment_status,
                payment_badge=payment_status_badge(payment_status),
                added_at=b.added_at,
            ))
        return rows

    def booking_details(self, booking_id: int) -> AdminBookingDetails:
        booking = self.booking_service.get_booking(booking_id)
        payment = booking.payments[0] if booking.payments else None
        return AdminBookingDetails(
            booking=BookingService.to_response(booking),
            visitor=visitor_summary(booking.visitor),
            experience=experience_brief(booking.experience),
            tickets=[TicketService.to_info(t) for t in booking.tickets],
            payment=payment_info(payment) if payment else None,
        )

    def update_booking_status(self, booking_id: int, new_status: str) -> Booking:
        return self.booking_service.update_status(booking_id, new_status)

    # Payments & invoices
    def update_payment_status(self, payment_id: int, new_status: str, now: Optional[datetime] = None) -> Payment:
        """Set a payment's status; marking it Paid stamps the date and issues the invoice"""
        if new_status not in VALID_PAYMENT_STATUSES:
            raise ValidationError("Invalid payment status.")

        payment = self.db.query(Payment).filter(Payment.payment_id == payment_id).first()
        if not payment:
            raise NotFoundError("Payment not found.")

        previous = payment.status
        try:
            payment.status = new_status
            if new_status == PaymentStatus.PAID.value:
                if previous != PaymentStatus.PAID.value or payment.payment_date is None:
                    payment.payment_date = now or datetime.now()
                self._issue_invoice(payment)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("payment_status_update_failed", payment_id=payment_id)
            raise PersistenceError()

        self.db.refresh(payment)
        logger.info("payment_status_updated", payment_id=payment_id, previous=previous, status=new_status)
        return payment

    def _issue_invoice(self, payment: Payment) -> None:
        existing = self.db.query(Invoice).filter(Invoice.payment_id == payment.payment_id).first()
        if existing:
            return
        total = Decimal(payment.amount)
        self.db.add(Invoice(
            payment_id=payment.payment_id,
            invoice_date=payment.payment_date,
            total_amount=total,
            tax_amount=split_tax(total, Decimal(str(settings.TAX_RATE))),
        ))

    def invoice_details(self, invoice_id: int) -> InvoiceDetails:
        invoice = self.db.query(Invoice).filter(Invoice.invoice_id == invoice_id).first()
        if not invoice:
            raise NotFoundError("Invoice not found.")

        payment = None
        booking = None
        if invoice.payment_id is not None:
            payment = self.db.query(Payment).filter(Payment.payment_id == invoice.payment_id).first()
        if payment is not None and payment.booking_id is not None:
            booking = self.db.query(Booking).filter(Booking.booking_id == payment.booking_id).first()

        total = Decimal(invoice.total_amount)
        tax = Decimal(invoice.tax_amount or 0)
        return InvoiceDetails(
            invoice_id=invoice.invoice_id,
            invoice_date=invoice.invoice_date,
            visitor_address=invoice.visitor_address,
            total_amount=total,
            tax_amount=tax,
            subtotal=total - tax,
            payment=payment_info(payment) if payment else None,
            booking_id=booking.booking_id if booking else None,
            visitor=visitor_summary(booking.visitor) if booking else None,
            experience=experience_brief(booking.experience) if booking else None,
        )

    # Profile
    def get_profile(self, admin: Admin) -> AdminProfile:
        user = admin.user
        return AdminProfile(
            admin_id=admin.admin_id,
            user_id=user.user_id,
            first_name=admin.first_name,
            last_name=admin.last_name,
            full_name=admin.full_name,
            email=user.email,
            phone=admin.phone,
            position=admin.position,
            image=user.image,
        )

    def update_profile(
        self,
        admin: Admin,
        update: AdminProfileUpdate,
        image: Optional[UploadFile] = None
    ) -> AdminProfile:
        user = admin.user
        taken = self.db.query(User).filter(User.email == update.email, User.user_id != user.user_id).first()
        if taken:
            raise ValidationError("This email is already in use by another account.")

        new_image = self.storage.save(image, PROFILE_IMAGE_FOLDER) if image and image.filename else None
        old_image = user.image

        try:
            admin.first_name = update.first_name
            admin.last_name = update.last_name
            admin.phone = update.phone
            admin.position = update.position
            user.email = update.email
            user.full_name = admin.full_name
            if new_image:
                user.image = new_image
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            self.storage.delete(new_image)
            logger.exception("admin_profile_update_failed", admin_id=admin.admin_id)
            raise PersistenceError()

        if new_image and old_image:
            self.storage.delete(old_image)
        logger.info("admin_profile_updated", admin_id=admin.admin_id)
        return self.get_profile(admin)

    def update_password(self, admin: Admin, request: PasswordUpdate) -> None:
        user = admin.user
        if not verify_password(request.current_password, user.password_hash):
            raise ValidationError("The current password is incorrect.")

        try:
            user.password_hash = get_password_hash(request.new_password)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("admin_password_update_failed", admin_id=admin.admin_id)
            raise PersistenceError()

        logger.info("admin_password_updated", admin_id=admin.admin_id)

    def delete_image(self, admin: Admin) -> None:
        user = admin.user
        if not user.image:
            raise NotFoundError("No profile image to delete.")

        old_image = user.image
        try:
            user.image = None
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("admin_image_delete_failed", admin_id=admin.admin_id)
            raise PersistenceError()

        self.storage.delete(old_image)
