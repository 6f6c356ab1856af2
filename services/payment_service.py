# services/payment_service.py
"""
Payment Service - recording payments and moving them through approval.
"""
import logging
import random
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from errors import (
     ConflictError,
     ExternalServiceError,
     InvalidStateError,
     NotFoundError,
     PermissionDeniedError,
     RentEaseError,
     ValidationError,
)
from models import Invoice, Lease, Payment, Property, User
from models.base import utcnow
from models.invoice import OPEN_STATUSES
from models.payment import PaymentStatus, PAYMENT_METHODS, PAYMENT_TYPES
from services.notification_service import NotificationService
from utils import email
from utils.currency import format_currency, to_decimal

logger = logging.getLogger(__name__)

RECEIPT_NUMBER_ATTEMPTS = 5
COUNTED_STATUSES = (PaymentStatus.COMPLETED.value, PaymentStatus.VERIFIED.value)


class PaymentService:
     """Service class for payment-related business logic."""

     @staticmethod
     def generate_receipt_number(db: Session, today: Optional[date] = None) -> str:
          """
          PAY-YYYYMMDD-NNNN with a random suffix, checked for uniqueness.

          Raises:
               RentEaseError: If no free number was found after RECEIPT_NUMBER_ATTEMPTS tries
          """
          today = today or date.today()
          for _ in range(RECEIPT_NUMBER_ATTEMPTS):
               candidate = f"PAY-{today:%Y%m%d}-{random.randint(0, 9999):04d}"
               exists = db.query(Payment.id).filter(Payment.receipt_number == candidate).first()
               if not exists:
                    return candidate
          raise RentEaseError("Could not generate a unique receipt number")

     @staticmethod
     def check_access(db: Session, payment: Payment, actor: dict) -> None:
          role = actor.get("role")
          if role == "tenant" and payment.tenant_id != actor.get("id"):
               raise PermissionDeniedError("You can only view your own payments")
          if role == "landlord":
               landlord_id = db.query(Property.landlord_id).filter(Property.id == payment.property_id).scalar()
               if landlord_id != actor.get("id"):
                    raise PermissionDeniedError("You can only access payments for your own properties")

     @staticmethod
     def record_payment(db: Session, data: dict, actor: dict) -> Payment:
          """
          Record a payment directly (cash received, bank transfer seen, ...).

          Args:
               data: tenant_id, property_id, amount and optionally lease_id, invoice_id,
                    payment_date, payment_method, payment_type, reference_number,
                    description, notes, status (pending or completed)

          Raises:
               PermissionDeniedError: If the actor is a tenant or does not own the property
               NotFoundError: If tenant, property, lease or invoice doesn't exist
               ConflictError: If the same payment was already recorded
          """
          if actor.get("role") not in ("landlord", "manager", "admin"):
               raise PermissionDeniedError(
                    "Insufficient permissions. Only managers, landlords, and admins can record payments directly."
               )

          amount = to_decimal(data.get("amount"))
          if amount <= 0:
               raise ValidationError("Payment amount must be greater than zero", field="amount")
          method = data.get("payment_method") or "cash"
          if method not in PAYMENT_METHODS:
               raise ValidationError(f"Invalid payment method: {method}", field="payment_method")
          payment_type = data.get("payment_type") or "rent"
          if payment_type not in PAYMENT_TYPES:
               raise ValidationError(f"Invalid payment type: {payment_type}", field="payment_type")

          tenant = db.query(User).filter(User.id == data.get("tenant_id")).first()
          if not tenant or tenant.role != "tenant":
               raise NotFoundError("Valid tenant")
          prop = db.query(Property).filter(Property.id == data.get("property_id")).first()
          if not prop:
               raise NotFoundError("Property", data.get("property_id"))
          if actor.get("role") == "landlord" and prop.landlord_id != actor.get("id"):
               raise PermissionDeniedError("You can only record payments for your own properties")

          lease = None
          if data.get("lease_id"):
               lease = db.query(Lease).filter(Lease.id == data["lease_id"]).first()
               if not lease:
                    raise NotFoundError("Lease", data["lease_id"])
               if lease.property_id != prop.id or lease.tenant_id != tenant.id:
                    raise ValidationError("Lease does not belong to this tenant and property", field="lease_id")
          invoice = None
          if data.get("invoice_id"):
               invoice = db.query(Invoice).filter(Invoice.id == data["invoice_id"]).first()
               if not invoice:
                    raise NotFoundError("Invoice", data["invoice_id"])
               if invoice.property_id != prop.id or invoice.tenant_id != tenant.id:
                    raise ValidationError("Invoice does not belong to this tenant and property", field="invoice_id")

          payment_date = data.get("payment_date") or date.today()
          duplicate = (
               db.query(Payment)
               .filter(
                    Payment.tenant_id == tenant.id,
                    Payment.amount == amount,
                    Payment.payment_date == payment_date,
                    Payment.reference_number == data.get("reference_number"),
                    Payment.status.notin_((PaymentStatus.CANCELLED.value, PaymentStatus.FAILED.value)),
               )
               .first()
          )
          if duplicate:
               raise ConflictError("Duplicate payment detected", context={"existing_payment_id": duplicate.id})

          status = data.get("status") or PaymentStatus.COMPLETED.value
          payment = Payment(
               receipt_number=PaymentService.generate_receipt_number(db, payment_date),
               tenant_id=tenant.id,
               property_id=prop.id,
               lease_id=lease.id if lease else None,
               invoice_id=invoice.id if invoice else None,
               amount=amount,
               payment_date=payment_date,
               payment_method=method,
               payment_type=payment_type,
               reference_number=data.get("reference_number"),
               description=data.get("description"),
               notes=data.get("notes"),
               due_date=data.get("due_date"),
               late_fee=to_decimal(data.get("late_fee")),
               status=status,
               approval_status="approved" if status == PaymentStatus.COMPLETED.value else "pending",
               recorded_by=actor["id"],
               approval_history=[],
          )
          payment.record_approval("submitted", actor["id"], "Payment submitted")
          if status == PaymentStatus.COMPLETED.value:
               payment.approved_by = actor["id"]
               payment.approved_at = utcnow()
          db.add(payment)
          db.flush()

          NotificationService.create_notification(
               db,
               recipient_id=tenant.id,
               sender_id=actor["id"],
               type="payment_submitted",
               title="Payment Recorded",
               message=f"A payment of {format_currency(amount)} has been recorded for your account.",
               related_document_id=payment.id,
               related_document_model="Payment",
          )
          if status == PaymentStatus.COMPLETED.value:
               PaymentService._apply_to_lease_and_invoice(payment)
               PaymentService._email_receipt(payment)
          logger.info("Payment %s of %s recorded for tenant %s", payment.receipt_number, amount, tenant.id)
          return payment

     @staticmethod
     def _apply_to_lease_and_invoice(payment: Payment) -> None:
          amount = Decimal(payment.amount)
          lease = payment.lease
          if lease is not None:
               lease.total_paid = Decimal(lease.total_paid or 0) + amount
               lease.balance_due = max(Decimal("0"), Decimal(lease.balance_due or 0) - amount)
               lease.last_payment_date = payment.payment_date
          invoice = payment.invoice
          if invoice is not None and invoice.status in OPEN_STATUSES:
               invoice.apply_payment(min(amount, invoice.outstanding_amount))

     @staticmethod
     def _reverse_from_lease_and_invoice(payment: Payment) -> None:
          amount = Decimal(payment.amount)
          lease = payment.lease
          if lease is not None:
               lease.total_paid = max(Decimal("0"), Decimal(lease.total_paid or 0) - amount)
               lease.balance_due = Decimal(lease.balance_due or 0) + amount
          if payment.invoice is not None:
               payment.invoice.reverse_payment(amount)

     @staticmethod
     def _email_receipt(payment: Payment) -> None:
          if not email.is_email_configured():
               return
          from services.pdf_service import generate_receipt_pdf
          try:
               email.send_receipt_email(payment, generate_receipt_pdf(payment))
          except ExternalServiceError as exc:
               logger.warning("Receipt email for payment %s failed: %s", payment.receipt_number, exc.message)

     @staticmethod
     def approve_payment(db: Session, payment: Payment, actor: dict, notes: str = "") -> Payment:
          if actor.get("role") == "tenant":
               raise PermissionDeniedError("Tenants cannot approve payments")
          PaymentService.check_access(db, payment, actor)
          if payment.approval_status != "pending":
               raise InvalidStateError("Payment is not pending approval")

          payment.approval_status = "approved"
          payment.approved_by = actor["id"]
          payment.approved_at = utcnow()
          payment.approval_notes = notes
          payment.status = PaymentStatus.COMPLETED.value
          payment.record_approval("approved", actor["id"], notes)
          PaymentService._apply_to_lease_and_invoice(payment)
          PaymentService._email_receipt(payment)

          NotificationService.create_notification(
               db,
               recipient_id=payment.tenant_id,
               sender_id=actor["id"],
               type="general",
               title="Payment Approved",
               message=f"Your payment of {format_currency(payment.amount)} has been approved and processed.",
               related_document_id=payment.id,
               related_document_model="Payment",
          )
          logger.info("Payment %s approved by user %s", payment.receipt_number, actor["id"])
          return payment

     @staticmethod
     def reject_payment(db: Session, payment: Payment, actor: dict, reason: str = "") -> Payment:
          if actor.get("role") == "tenant":
               raise PermissionDeniedError("Tenants cannot reject payments")
          PaymentService.check_access(db, payment, actor)
          if payment.approval_status != "pending":
               raise InvalidStateError("Payment is not pending approval")
          if not reason or not reason.strip():
               raise ValidationError("Rejection reason is required", field="reason")

          payment.approval_status = "rejected"
          payment.rejection_reason = reason.strip()
          payment.status = PaymentStatus.FAILED.value
          payment.record_approval("rejected", actor["id"], reason.strip())

          NotificationService.create_notification(
               db,
               recipient_id=payment.tenant_id,
               sender_id=actor["id"],
               type="general",
               title="Payment Rejected",
               message=f"Your payment of {format_currency(payment.amount)} has been rejected. Reason: {reason.strip()}",
               related_document_id=payment.id,
               related_document_model="Payment",
          )
          logger.info("Payment %s rejected by user %s", payment.receipt_number, actor["id"])
          return payment

     @staticmethod
     def cancel_payment(db: Session, payment: Payment, actor: dict, reason: str = "") -> Payment:
          if actor.get("role") not in ("manager", "admin"):
               raise PermissionDeniedError("Only managers and administrators can cancel payments")
          if payment.status == PaymentStatus.CANCELLED.value:
               raise InvalidStateError("Payment is already cancelled")

          if payment.status in COUNTED_STATUSES:
               PaymentService._reverse_from_lease_and_invoice(payment)
          payment.status = PaymentStatus.CANCELLED.value
          payment.approval_status = "rejected"
          payment.cancelled_by = actor["id"]
          payment.cancelled_at = utcnow()
          payment.cancellation_reason = reason
          payment.record_approval("cancelled", actor["id"], reason)
          logger.info("Payment %s cancelled by user %s", payment.receipt_number, actor["id"])
          return payment

     @staticmethod
     def total_by_period(db: Session, start: date, end: date, property_ids: Optional[list[int]] = None) -> dict:
          """Sum and count of completed/verified payments dated within [start, end]."""
          query = db.query(func.coalesce(func.sum(Payment.amount), 0), func.count(Payment.id)).filter(
               Payment.payment_date >= start,
               Payment.payment_date <= end,
               Payment.status.in_(COUNTED_STATUSES),
          )
          if property_ids is not None:
               query = query.filter(Payment.property_id.in_(property_ids))
          total, count = query.one()
          return {"total_amount": to_decimal(total), "count": count}
