# routers/payments.py
"""
Payment API routes.

Landlords, managers and admins record payments directly (cash received,
bank transfer seen). Payments recorded as pending go through
approve/reject; managers and admins can cancel.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import verify_token
from models import Payment, Property
from schemas.payment import PaymentActionRequest, PaymentCreate, PaymentListResponse, PaymentResponse
from services.payment_service import PaymentService
from services.pdf_service import generate_receipt_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


def _get_payment_or_404(db: Session, payment_id: int) -> Payment:
     payment = db.query(Payment).filter(Payment.id == payment_id).first()
     if not payment:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail="Payment not found"
          )
     return payment


@router.post(
     "",
     response_model=PaymentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a payment"
)
def create_payment(
     body: PaymentCreate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     payment = PaymentService.record_payment(db, body.model_dump(exclude_none=True), token)
     db.commit()
     db.refresh(payment)
     return payment


@router.get(
     "",
     response_model=PaymentListResponse,
     summary="List payments"
)
def list_payments(
     tenant_id: Optional[int] = Query(None),
     property_id: Optional[int] = Query(None),
     status_filter: Optional[str] = Query(None, alias="status"),
     approval_status: Optional[str] = Query(None),
     start_date: Optional[date] = Query(None),
     end_date: Optional[date] = Query(None),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=100),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """
     **Role-based access:**
     - **Tenant**: own payments only.
     - **Landlord**: payments on own properties.
     - **Admin / Manager**: all payments.
     """
     query = db.query(Payment)
     role = token.get("role")
     if role == "tenant":
          query = query.filter(Payment.tenant_id == token.get("id"))
     elif role == "landlord":
          query = query.join(Property, Payment.property_id == Property.id).filter(
               Property.landlord_id == token.get("id")
          )

     if tenant_id and role != "tenant":
          query = query.filter(Payment.tenant_id == tenant_id)
     if property_id:
          query = query.filter(Payment.property_id == property_id)
     if status_filter:
          query = query.filter(Payment.status == status_filter)
     if approval_status:
          query = query.filter(Payment.approval_status == approval_status)
     if start_date:
          query = query.filter(Payment.payment_date >= start_date)
     if end_date:
          query = query.filter(Payment.payment_date <= end_date)

     total = query.count()
     payments = (
          query.order_by(Payment.payment_date.desc(), Payment.id.desc())
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     return PaymentListResponse(
          payments=[PaymentResponse.model_validate(p) for p in payments],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get(
     "/{payment_id}",
     response_model=PaymentResponse,
     summary="Get payment by ID"
)
def get_payment(
     payment_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     payment = _get_payment_or_404(db, payment_id)
     PaymentService.check_access(db, payment, token)
     return payment


@router.get(
     "/{payment_id}/receipt",
     summary="Download payment receipt PDF"
)
def download_receipt(
     payment_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     payment = _get_payment_or_404(db, payment_id)
     PaymentService.check_access(db, payment, token)
     if payment.status not in ("completed", "verified"):
          raise HTTPException(
               status_code=status.HTTP_400_BAD_REQUEST,
               detail="Receipts are only available for completed payments"
          )

     return Response(
          content=generate_receipt_pdf(payment),
          media_type="application/pdf",
          headers={"Content-Disposition": f'attachment; filename="Receipt_{payment.receipt_number}.pdf"'},
     )


@router.post("/{payment_id}/approve", response_model=PaymentResponse)
def approve_payment(
     payment_id: int,
     body: Optional[PaymentActionRequest] = Body(None),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     payment = _get_payment_or_404(db, payment_id)
     PaymentService.approve_payment(db, payment, token, (body.notes if body else None) or "")
     db.commit()
     db.refresh(payment)
     return payment


@router.post("/{payment_id}/reject", response_model=PaymentResponse)
def reject_payment(
     payment_id: int,
     body: Optional[PaymentActionRequest] = Body(None),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     payment = _get_payment_or_404(db, payment_id)
     PaymentService.reject_payment(db, payment, token, (body.reason if body else None) or "")
     db.commit()
     db.refresh(payment)
     return payment


@router.post("/{payment_id}/cancel", response_model=PaymentResponse)
def cancel_payment(
     payment_id: int,
     body: Optional[PaymentActionRequest] = Body(None),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     payment = _get_payment_or_404(db, payment_id)
     PaymentService.cancel_payment(db, payment, token, (body.reason if body else None) or "")
     db.commit()
     db.refresh(payment)
     return payment
