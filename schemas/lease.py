# schemas/lease.py
"""
Pydantic schemas for Lease API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class LeaseCreate(BaseModel):
     """Schema for drafting a lease."""
     property_id: int = Field(..., gt=0)
     tenant_id: int = Field(..., gt=0)
     property_request_id: Optional[int] = Field(None, gt=0)
     start_date: date
     end_date: date
     monthly_rent: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     security_deposit: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
     payment_due_day: int = Field(default=1, ge=1, le=31)
     terms: Dict[str, Any] = {}

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "property_id": 1,
                    "tenant_id": 2,
                    "start_date": "2026-03-01",
                    "end_date": "2027-02-28",
                    "monthly_rent": 5000.00,
                    "security_deposit": 5000.00,
                    "payment_due_day": 1,
                    "terms": {"pets_allowed": False, "utilities_included": ["water"]},
               }
          }
     )


class LeaseSignRequest(BaseModel):
     signature_data: str = Field(..., min_length=1, description="Typed name or encoded signature image")
     full_name: Optional[str] = None


class LeasePaymentRequest(BaseModel):
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
     payment_date: Optional[date] = None
     payment_method: str = "cash"
     reference_number: Optional[str] = None


class LeaseActivationRequest(BaseModel):
     action: str = Field(..., pattern="^(activate|deactivate)$")
     reason: Optional[str] = None


class LeaseResponse(BaseModel):
     id: int
     property_id: int
     tenant_id: int
     landlord_id: int
     property_request_id: Optional[int] = None
     start_date: date
     end_date: date
     monthly_rent: Decimal
     security_deposit: Decimal
     payment_due_day: int
     status: str
     tenant_signed: bool
     tenant_signed_at: Optional[datetime] = None
     landlord_signed: bool
     landlord_signed_at: Optional[datetime] = None
     next_payment_due: Optional[date] = None
     last_payment_date: Optional[date] = None
     total_paid: Decimal
     balance_due: Decimal
     first_payment_required: Decimal
     first_payment_made: bool
     first_payment_date: Optional[date] = None
     document_url: Optional[str] = None
     document_name: Optional[str] = None
     terms: Dict[str, Any] = {}
     status_history: List[Dict[str, Any]] = []
     created_at: datetime

     # Optional related data
     tenant_name: Optional[str] = None
     property_address: Optional[str] = None
     next_action: Optional[Dict[str, Any]] = None

     model_config = ConfigDict(from_attributes=True)


class LeaseListResponse(BaseModel):
     leases: List[LeaseResponse]
     total: int
     page: int = 1
     page_size: int = 50
