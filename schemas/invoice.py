# schemas/invoice.py
"""
Pydantic schemas for Invoice API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class InvoiceStatusEnum(str, Enum):
     """Invoice lifecycle status options."""
     DRAFT = "draft"
     SENT = "sent"
     VIEWED = "viewed"
     PAID = "paid"
     OVERDUE = "overdue"
     CANCELLED = "cancelled"


class InvoiceItemCreate(BaseModel):
     """A single billed line."""
     description: str = Field(..., min_length=1, max_length=255)
     quantity: Decimal = Field(default=Decimal("1"), gt=0, max_digits=10, decimal_places=2)
     unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Defaults to quantity x unit_price")
     period_start: Optional[date] = None
     period_end: Optional[date] = None


class InvoiceCreate(BaseModel):
     """Schema for creating a new invoice."""
     tenant_id: int = Field(..., gt=0, description="Tenant user ID")
     property_id: int = Field(..., gt=0, description="Billed property ID")
     lease_id: Optional[int] = Field(None, gt=0, description="Lease ID, if the charge belongs to a lease")
     items: List[InvoiceItemCreate] = Field(..., min_length=1)
     issue_date: Optional[date] = None
     due_date: date = Field(..., description="Payment due date")
     tax_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
     notes: Optional[str] = None
     payment_terms: Optional[str] = Field(None, max_length=255)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "tenant_id": 2,
                    "property_id": 1,
                    "lease_id": 1,
                    "items": [
                         {"description": "Monthly Rent", "quantity": 1, "unit_price": 5000.00},
                    ],
                    "due_date": "2026-02-10",
                    "tax_amount": 0,
                    "payment_terms": "Due within 10 days",
               }
          }
     )


class InvoiceUpdate(BaseModel):
     """Schema for editing a draft invoice."""
     items: Optional[List[InvoiceItemCreate]] = None
     due_date: Optional[date] = None
     tax_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     notes: Optional[str] = None
     payment_terms: Optional[str] = Field(None, max_length=255)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "due_date": "2026-02-15",
                    "notes": "Includes water bill",
               }
          }
     )


class InvoiceActionRequest(BaseModel):
     """Body for POST /api/invoices/{id}/{action}. Each action reads the fields it needs."""
     notes: Optional[str] = None
     reason: Optional[str] = None
     amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
     payment_date: Optional[date] = None
     payment_method: Optional[str] = None
     reference_number: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "amount": 2500.00,
                    "payment_method": "bank_transfer",
                    "reference_number": "TRX-12345",
               }
          }
     )


class InvoiceItemResponse(BaseModel):
     id: int
     description: str
     quantity: Decimal
     unit_price: Decimal
     amount: Decimal
     period_start: Optional[date] = None
     period_end: Optional[date] = None

     model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
     """Schema for invoice response."""
     id: int
     invoice_number: str
     issue_date: date
     due_date: date
     tenant_id: int
     property_id: int
     lease_id: Optional[int] = None
     items: List[InvoiceItemResponse] = []
     subtotal: Decimal
     tax_amount: Decimal
     total_amount: Decimal
     paid_amount: Decimal
     outstanding_amount: Decimal
     is_overdue: bool = False
     status: InvoiceStatusEnum
     approval_status: str
     approval_notes: Optional[str] = None
     rejection_reason: Optional[str] = None
     notes: Optional[str] = None
     payment_terms: Optional[str] = None
     sent_at: Optional[datetime] = None
     reminders_sent: int = 0
     created_by: int
     created_at: datetime

     # Optional related data
     tenant_name: Optional[str] = None
     tenant_email: Optional[str] = None
     property_address: Optional[str] = None

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 1,
                    "invoice_number": "INV-202601-0001",
                    "issue_date": "2026-01-31",
                    "due_date": "2026-02-10",
                    "tenant_id": 2,
                    "property_id": 1,
                    "lease_id": 1,
                    "subtotal": 5000.00,
                    "tax_amount": 0,
                    "total_amount": 5000.00,
                    "paid_amount": 0,
                    "outstanding_amount": 5000.00,
                    "status": "sent",
                    "approval_status": "approved",
                    "created_by": 1,
                    "created_at": "2026-01-31T10:30:00",
                    "tenant_name": "John Doe",
                    "tenant_email": "john@example.com",
                    "property_address": "12 Kabulonga Road, Lusaka",
               }
          }
     )


class InvoiceListResponse(BaseModel):
     """Schema for paginated invoice list response."""
     invoices: List[InvoiceResponse]
     total: int
     page: int = 1
     page_size: int = 50

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "invoices": [],
                    "total": 0,
                    "page": 1,
                    "page_size": 50
               }
          }
     )
