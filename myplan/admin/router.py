from datetime import date
from typing import List, Optional

import pydantic
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from myplan.admin.admin_service import AdminManagementService, payment_info
from myplan.admin.dashboard_service import DashboardService
from myplan.admin.report_service import ReportService
from myplan.admin.schemas import (
    AdminBookingDetails, AdminBookingRow, AdminProfile, AdminProfileUpdate, DashboardData,
    ExportFormat, GeneratedReport, InvoiceDetails, PasswordUpdate, PaymentStatusUpdate,
    ReportIndex, ReportRequest
)
from myplan.auth.dependencies import get_current_admin, require_admin
from myplan.bookings.booking_service import BookingService
from myplan.bookings.schemas import BookingResponse, BookingStatusUpdate, PaymentInfo
from myplan.database import get_db
from myplan.models import Admin
from myplan.storage import FileStorageService, get_storage

router = APIRouter(dependencies=[Depends(require_admin)])


def profile_form(
    first_name: str = Form(...),
    last_name: str = Form(...),
    email: str = Form(...),
    phone: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
) -> AdminProfileUpdate:
    try:
        return AdminProfileUpdate(
            first_name=first_name, last_name=last_name, email=email, phone=phone or None,
            position=position or None,
        )
    except pydantic.ValidationError as e:
        raise RequestValidationError(e.errors())


# Dashboard & Reports
@router.get("/dashboard", response_model=DashboardData)
def get_dashboard(db: Session = Depends(get_db)):
    """Headline totals, growth, recent bookings, revenue trend and categories"""
    return DashboardService(db).get_dashboard()


@router.get("/reports", response_model=ReportIndex)
def get_reports(db: Session = Depends(get_db)):
    return ReportService(db).index()


@router.post("/reports/generate", response_model=GeneratedReport)
def generate_report(request: ReportRequest, db: Session = Depends(get_db)):
    """Revenue, bookings, users or experiences report over a date range"""
    return ReportService(db).generate(request)


@router.get("/reports/export")
def export_report(
    report_type: str = Query(...),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    format: ExportFormat = Query(ExportFormat.CSV),
    db: Session = Depends(get_db)
):
    """Export a generated report to CSV/Excel"""
    try:
        request = ReportRequest(report_type=report_type, start_date=start_date, end_date=end_date)
    except pydantic.ValidationError as e:
        raise RequestValidationError(e.errors())

    output, media_type, filename = ReportService(db).export(request, format)
    return StreamingResponse(
        output,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


# Bookings, Payments & Invoices
@router.get("/bookings", response_model=List[AdminBookingRow])
def list_bookings(db: Session = Depends(get_db)):
    return AdminManagementService(db).list_bookings()


@router.get("/bookings/{booking_id}", response_model=AdminBookingDetails)
def get_booking_details(booking_id: int, db: Session = Depends(get_db)):
    return AdminManagementService(db).booking_details(booking_id)


@router.post("/bookings/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(booking_id: int, request: BookingStatusUpdate, db: Session = Depends(get_db)):
    booking = AdminManagementService(db).update_booking_status(booking_id, request.status)
    return BookingService.to_response(booking)


@router.get("/invoices/{invoice_id}", response_model=InvoiceDetails)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return AdminManagementService(db).invoice_details(invoice_id)


@router.post("/payments/{payment_id}/status", response_model=PaymentInfo)
def update_payment_status(payment_id: int, request: PaymentStatusUpdate, db: Session = Depends(get_db)):
    """Mark a payment Paid, Pending or Failed; Paid issues the invoice"""
    payment = AdminManagementService(db).update_payment_status(payment_id, request.status)
    return payment_info(payment)


# Profile
@router.get("/profile", response_model=AdminProfile)
def get_profile(admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
    return AdminManagementService(db).get_profile(admin)


@router.put("/profile", response_model=AdminProfile)
def update_profile(
    update: AdminProfileUpdate = Depends(profile_form),
    image: Optional[UploadFile] = File(None),
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    return AdminManagementService(db, storage).update_profile(admin, update, image)


@router.post("/profile/password")
def update_password(
    request: PasswordUpdate,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    AdminManagementService(db).update_password(admin, request)
    return {"message": "Password updated successfully!"}


@router.delete("/profile/image")
def delete_profile_image(
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    AdminManagementService(db, storage).delete_image(admin)
    return {"message": "Profile image removed successfully!"}
