# services/__init__.py
from .invoice_service import InvoiceService
from .lease_service import LeaseService
from .maintenance_service import MaintenanceService
from .notification_service import NotificationService
from .payment_service import PaymentService
from .property_request_service import PropertyRequestService

__all__ = [
     "InvoiceService",
     "LeaseService",
     "MaintenanceService",
     "NotificationService",
     "PaymentService",
     "PropertyRequestService",
]
