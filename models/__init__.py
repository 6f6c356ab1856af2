# models/__init__.py
from .base import Base
from .user import User
from .property import Property
from .property_request import PropertyRequest
from .lease import Lease
from .invoice import Invoice, InvoiceItem
from .payment import Payment
from .maintenance import MaintenanceRequest, MaintenanceNote
from .notification import Notification

__all__ = [
     "Base",
     "User",
     "Property",
     "PropertyRequest",
     "Lease",
     "Invoice",
     "InvoiceItem",
     "Payment",
     "MaintenanceRequest",
     "MaintenanceNote",
     "Notification",
]
