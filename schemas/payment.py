# schemas/payment.py
"""
Pydantic schemas for the payments API.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


class PaymentCreate(BaseModel):
     """Request body for POST /api/payments."""

     tenant_id: int = Field(..., gt=0)
     property_id: int = Field(..., gt=0)
     lease_id: Optional[int] = Field(None, gt=0)
     invoice_id: Optional[int] = Field(None, gt=0)
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
     payment_date: Optional[date] = None
     payment_method: str = Field(default="cash", description="cash, bank_transfer, card, mobile_money, cheque or manual")
     payment_type: str = Field(default="rent", description="rent, deposit, utilities, maintenance, fees or other")
     reference_number: Optional[str] = Field(None, max_length=100)
     description: Optional[str] = Field(None, max_length=255)
     notes: Optional[str] = None
     due_date: Optional[date] = None
     late_fee: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     status: Optional[str] = Field(None, pattern="^(pending|completed)$")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "tenant_id": 2,
                    "property_id": 1,
                    "lease_id": 1,
                    "amount": 5000.00,
                    "payment_method": "mobile_money",
                    "payment_type": "rent",
                    "reference_number": "MM-88213",
               }
          }
     )


class PaymentActionRequest(BaseModel):
     """Body for approve/reject/cancel."""

     notes: Optional[str] = None
     reason: Optional[str] = None


class PaymentResponse(BaseModel):
     id: int
     receipt_number: str
     amount: Decimal
     payment_date: date
     payment_method: str
     payment_type: str
     tenant_id: int
     property_id: Optional[int] = None
     lease_id: Optional[int] = None
     invoice_id: Optional[int] = None
     status: str
     approval_status: str
     approval_notes: Optional[str] = None
     rejection_reason: Optional[str] = None
     reference_number: Optional[str] = None
     description: Optional[str] = None
     notes: Optional[str] = None
     late_fee: Decimal = Decimal("0")
     recorded_by: Optional[int] = None
     cancellation_reason: Optional[str] = None
     created_at: datetime

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 1,
                    "receipt_number": "PAY-20260205-0412",
                    "amount": 5000.00,
                    "payment_date": "2026-02-05",
                    "payment_method": "mobile_money",
                    "payment_type": "rent",
                    "tenant_id": 2,
                    "property_id": 1,
                    "status": "completed",
                    "approval_status": "approved",
                    "created_at": "2026-02-05T09:12:00",
               }
          }
     )


class PaymentListResponse(BaseModel):
     payments: List[PaymentResponse]
     total: int
     page: int = 1
     page_size: int = 50
