# routers/invoices.py
"""
Invoice API routes for RentEase backend.

Role-based access:
- Tenant: read-only access to own invoices
- Landlord: invoices for own properties
- Admin / Manager: all invoices
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import verify_token
from models import Invoice, Payment, Property
from schemas.invoice import (
     InvoiceActionRequest,
     InvoiceCreate,
     InvoiceUpdate,
     InvoiceResponse,
     InvoiceListResponse,
     InvoiceStatusEnum,
)
from schemas.payment import PaymentResponse
from services.invoice_service import InvoiceService, BILLING_ROLES
from services.pdf_service import generate_invoice_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])

INVOICE_ACTIONS = ("approve", "reject", "mark-paid", "cancel", "remind", "duplicate")


def _get_invoice_or_404(db: Session, invoice_id: int) -> Invoice:
     invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
     if not invoice:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail="Invoice not found"
          )
     return invoice


def _require_writable(db: Session, invoice: Invoice, token: dict) -> None:
     """Tenants have read-only access; everyone else needs write access to the invoice."""
     if InvoiceService.check_access(db, invoice, token):
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="Tenants have read-only access to invoices"
          )


@router.post(
     "",
     response_model=InvoiceResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a new invoice"
)
def create_invoice(
     invoice_data: InvoiceCreate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Create a draft invoice for a tenant.

     - **items**: line items; amount defaults to quantity x unit_price
     - **tax_amount**: added on top of the items subtotal
     - **due_date**: cannot precede the issue date
     """
     if token.get("role") not in BILLING_ROLES:
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="Insufficient permissions to create invoices"
          )

     prop = db.query(Property).filter(Property.id == invoice_data.property_id).first()
     if not prop:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail="Property not found"
          )
     if token.get("role") == "landlord" and prop.landlord_id != token.get("id"):
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="You can only create invoices for your own properties"
          )

     invoice = InvoiceService.create_invoice(
          db,
          tenant_id=invoice_data.tenant_id,
          property_id=invoice_data.property_id,
          lease_id=invoice_data.lease_id,
          items=[item.model_dump() for item in invoice_data.items],
          issue_date=invoice_data.issue_date,
          due_date=invoice_data.due_date,
          tax_amount=invoice_data.tax_amount,
          notes=invoice_data.notes,
          payment_terms=invoice_data.payment_terms,
          created_by=token["id"],
     )
     db.commit()
     db.refresh(invoice)

     return _build_invoice_response(invoice)


@router.get(
     "",
     response_model=InvoiceListResponse,
     summary="List invoices with filters"
)
def list_invoices(
     tenant_id: Optional[int] = Query(None, description="Filter by tenant ID"),
     property_id: Optional[int] = Query(None, description="Filter by property ID"),
     lease_id: Optional[int] = Query(None, description="Filter by lease ID"),
     status_filter: Optional[InvoiceStatusEnum] = Query(None, alias="status", description="Filter by status"),
     overdue_only: bool = Query(False, description="Show only overdue invoices"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, description="Items per page"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Retrieve a paginated list of invoices, newest due date first.

     **Role-based access:**
     - **Tenant**: Only own invoices (tenant_id filter is ignored).
     - **Landlord**: Only invoices on own properties.
     - **Admin / Manager**: All invoices.
     """
     query = db.query(Invoice)

     role = token.get("role")
     if role == "tenant":
          query = query.filter(Invoice.tenant_id == token.get("id"))
     elif role == "landlord":
          query = query.join(Property, Invoice.property_id == Property.id).filter(
               Property.landlord_id == token.get("id")
          )
     elif tenant_id:
          query = query.filter(Invoice.tenant_id == tenant_id)

     if role == "landlord" and tenant_id:
          query = query.filter(Invoice.tenant_id == tenant_id)
     if property_id:
          query = query.filter(Invoice.property_id == property_id)
     if lease_id:
          query = query.filter(Invoice.lease_id == lease_id)
     if status_filter:
          query = query.filter(Invoice.status == status_filter.value)
     if overdue_only:
          query = query.filter(
               Invoice.status.in_(("sent", "viewed", "overdue")),
               Invoice.due_date < date.today(),
          )

     total = query.count()
     offset = (page - 1) * page_size
     invoices = query.order_by(Invoice.due_date.desc(), Invoice.id.desc()).offset(offset).limit(page_size).all()

     return InvoiceListResponse(
          invoices=[_build_invoice_response(inv) for inv in invoices],
          total=total,
          page=page,
          page_size=page_size
     )


@router.get(
     "/summary",
     summary="Invoice totals for a tenant"
)
def get_tenant_summary(
     tenant_id: Optional[int] = Query(None, description="Required unless the caller is the tenant"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Count and amount per status plus the outstanding balance.

     Tenants always get their own summary; landlords only see invoices on
     their own properties.
     """
     role = token.get("role")
     if role == "tenant":
          return InvoiceService.tenant_summary(db, token["id"])
     if not tenant_id:
          raise HTTPException(
               status_code=status.HTTP_400_BAD_REQUEST,
               detail="tenant_id is required"
          )
     landlord_id = token["id"] if role == "landlord" else None
     return InvoiceService.tenant_summary(db, tenant_id, landlord_id=landlord_id)


@router.get(
     "/{invoice_id}",
     response_model=InvoiceResponse,
     summary="Get invoice by ID"
)
def get_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Retrieve a specific invoice. A tenant opening a sent invoice marks it viewed.
     """
     invoice = _get_invoice_or_404(db, invoice_id)
     InvoiceService.check_access(db, invoice, token)

     if invoice.status == "sent" and token.get("role") == "tenant":
          InvoiceService.mark_viewed(invoice, token)
          db.commit()
          db.refresh(invoice)

     return _build_invoice_response(invoice)


@router.put(
     "/{invoice_id}",
     response_model=InvoiceResponse,
     summary="Update a draft invoice"
)
def update_invoice(
     invoice_id: int,
     invoice_data: InvoiceUpdate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Edit a draft invoice. Only provided fields are updated; items, when
     given, replace the existing lines and the totals are recalculated.
     """
     invoice = _get_invoice_or_404(db, invoice_id)
     _require_writable(db, invoice, token)

     changes = invoice_data.model_dump(exclude_unset=True)
     InvoiceService.update_invoice(db, invoice, changes)
     db.commit()
     db.refresh(invoice)

     return _build_invoice_response(invoice)


@router.delete(
     "/{invoice_id}",
     status_code=status.HTTP_204_NO_CONTENT,
     summary="Delete invoice"
)
def delete_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Delete an invoice by ID.

     Note: This permanently removes the invoice record. Paid invoices are kept.
     """
     role = token.get("role")
     if role not in ["admin", "manager"]:
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="Only admins and managers can delete invoices"
          )

     invoice = _get_invoice_or_404(db, invoice_id)
     if invoice.status == "paid":
          raise HTTPException(
               status_code=status.HTTP_400_BAD_REQUEST,
               detail="Paid invoices cannot be deleted"
          )

     db.delete(invoice)
     db.commit()
     logger.info("Invoice %s deleted by user %s", invoice.invoice_number, token.get("id"))

     return None


@router.get(
     "/{invoice_id}/pdf",
     summary="Download invoice PDF"
)
def download_invoice_pdf(
     invoice_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     invoice = _get_invoice_or_404(db, invoice_id)
     InvoiceService.check_access(db, invoice, token)

     pdf_bytes = generate_invoice_pdf(invoice)
     return Response(
          content=pdf_bytes,
          media_type="application/pdf",
          headers={"Content-Disposition": f'attachment; filename="Invoice_{invoice.invoice_number}.pdf"'},
     )


@router.get(
     "/{invoice_id}/payments",
     response_model=list[PaymentResponse],
     summary="Payments recorded against an invoice"
)
def list_invoice_payments(
     invoice_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     invoice = _get_invoice_or_404(db, invoice_id)
     InvoiceService.check_access(db, invoice, token)

     payments = (
          db.query(Payment)
          .filter(Payment.invoice_id == invoice.id)
          .order_by(Payment.payment_date.desc(), Payment.id.desc())
          .all()
     )
     return [PaymentResponse.model_validate(p) for p in payments]


@router.post(
     "/{invoice_id}/send",
     summary="Send invoice to tenant"
)
def send_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Send a draft invoice: the tenant is notified (and emailed when email
     delivery is configured) and the invoice moves to `sent`.
     """
     invoice = _get_invoice_or_404(db, invoice_id)
     _require_writable(db, invoice, token)

     InvoiceService.send_invoice(db, invoice, token)
     db.commit()
     db.refresh(invoice)

     return {
          "message": "Invoice sent successfully",
          "invoice": _build_invoice_response(invoice),
     }


@router.post(
     "/{invoice_id}/{action}",
     summary="Run an invoice workflow action"
)
def invoice_action(
     invoice_id: int,
     action: str,
     body: Optional[InvoiceActionRequest] = Body(None),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Workflow actions on an invoice:

     - **approve** (manager/admin): optional `notes`
     - **reject** (manager/admin): `reason`
     - **mark-paid**: optional `amount` (defaults to the outstanding balance),
       `payment_date`, `payment_method`, `reference_number`
     - **cancel** (manager/admin): optional `reason`
     - **remind**: send a payment reminder to the tenant
     - **duplicate**: copy as a new draft due in 30 days
     """
     if action not in INVOICE_ACTIONS:
          raise HTTPException(
               status_code=status.HTTP_400_BAD_REQUEST,
               detail="Invalid action"
          )
     body = body or InvoiceActionRequest()

     invoice = _get_invoice_or_404(db, invoice_id)
     _require_writable(db, invoice, token)

     result = {}
     if action == "approve":
          InvoiceService.approve_invoice(db, invoice, token, body.notes)
          message = "Invoice approved successfully"
     elif action == "reject":
          InvoiceService.reject_invoice(db, invoice, token, body.reason)
          message = "Invoice rejected"
     elif action == "mark-paid":
          payment = InvoiceService.mark_paid(
               db,
               invoice,
               token,
               amount=body.amount,
               payment_date=body.payment_date,
               payment_method=body.payment_method or "cash",
               reference=body.reference_number,
          )
          message = "Payment recorded successfully"
          result["payment_id"] = payment.id
          result["receipt_number"] = payment.receipt_number
     elif action == "cancel":
          InvoiceService.cancel_invoice(db, invoice, token, body.reason)
          message = "Invoice cancelled"
     elif action == "remind":
          result["reminders_sent"] = InvoiceService.send_reminder(db, invoice, token)
          message = "Reminder sent successfully"
     else:
          copy = InvoiceService.duplicate_invoice(db, invoice, token)
          db.commit()
          db.refresh(copy)
          return {
               "message": "Invoice duplicated successfully",
               "invoice": _build_invoice_response(copy),
          }

     db.commit()
     db.refresh(invoice)
     logger.info("Invoice %s: %s by user %s", invoice.invoice_number, action, token.get("id"))

     return {
          "message": message,
          "invoice": _build_invoice_response(invoice),
          **result,
     }


def _build_invoice_response(invoice: Invoice) -> InvoiceResponse:
     """
     Helper function to build InvoiceResponse with related data.
     """
     response = InvoiceResponse.model_validate(invoice)
     if invoice.tenant is not None:
          response.tenant_name = invoice.tenant.name
          response.tenant_email = invoice.tenant.email
     if invoice.premises is not None:
          response.property_address = invoice.premises.address
     return response
