"""
Admin Module

Back-office endpoints: dashboard metrics, analytics reports with CSV/Excel
export, booking and payment management, invoices and the admin profile.
"""

from .router import router
from .admin_service import AdminManagementService
from .dashboard_service import DashboardService
from .report_service import ReportService

__all__ = [
    "router",
    "AdminManagementService",
    "DashboardService",
    "ReportService",
]
