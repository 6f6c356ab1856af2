# schemas/__init__.py
from .auth import RegisterRequest, LoginRequest, UserResponse, TokenResponse
from .invoice import (
     InvoiceCreate,
     InvoiceUpdate,
     InvoiceActionRequest,
     InvoiceResponse,
     InvoiceListResponse,
)
from .lease import LeaseCreate, LeaseResponse, LeaseListResponse
from .maintenance import MaintenanceCreate, MaintenanceUpdate, MaintenanceResponse, MaintenanceListResponse
from .notification import NotificationCreate, NotificationPatch, NotificationResponse, NotificationListResponse
from .payment import PaymentCreate, PaymentActionRequest, PaymentResponse, PaymentListResponse
from .property import PropertyCreate, PropertyUpdate, PropertyResponse, PropertyListResponse
from .property_request import (
     PropertyRequestCreate,
     ApproveRequest,
     RejectRequest,
     PropertyRequestResponse,
     PropertyRequestListResponse,
)

__all__ = [
     "RegisterRequest",
     "LoginRequest",
     "UserResponse",
     "TokenResponse",
     "InvoiceCreate",
     "InvoiceUpdate",
     "InvoiceActionRequest",
     "InvoiceResponse",
     "InvoiceListResponse",
     "LeaseCreate",
     "LeaseResponse",
     "LeaseListResponse",
     "MaintenanceCreate",
     "MaintenanceUpdate",
     "MaintenanceResponse",
     "MaintenanceListResponse",
     "NotificationCreate",
     "NotificationPatch",
     "NotificationResponse",
     "NotificationListResponse",
     "PaymentCreate",
     "PaymentActionRequest",
     "PaymentResponse",
     "PaymentListResponse",
     "PropertyCreate",
     "PropertyUpdate",
     "PropertyResponse",
     "PropertyListResponse",
     "PropertyRequestCreate",
     "ApproveRequest",
     "RejectRequest",
     "PropertyRequestResponse",
     "PropertyRequestListResponse",
]
