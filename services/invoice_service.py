# services/invoice_service.py
"""
Invoice Service - Business logic layer for invoice operations.

This service handles invoice creation, the approval/send/payment workflow,
and the scheduled jobs (monthly rent invoices, overdue marking), separate
from the API layer.

Every workflow method takes the acting user as the decoded token dict
({"id": ..., "role": ...}) and raises errors from errors.py on bad role or
bad state.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from errors import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError, ExternalServiceError
from models import Invoice, InvoiceItem, Lease, Payment, Property, User
from models.base import utcnow
from models.invoice import InvoiceStatus, ApprovalStatus, OPEN_STATUSES
from models.lease import LeaseStatus
from models.payment import PaymentStatus
from services.notification_service import NotificationService
from services.payment_service import PaymentService
from utils.currency import format_currency, to_decimal
from utils.dates import add_months, first_of_next_month, format_date
from utils import email

logger = logging.getLogger(__name__)

BILLING_ROLES = ("landlord", "manager", "admin")
STAFF_ROLES = ("manager", "admin")
MONTHLY_RENT_DUE_DAY = 10
DUPLICATE_DUE_DAYS = 30


class InvoiceService:
     """Service class for invoice-related business logic."""

     # ------------------------------------------------------------------
     # Numbering and access
     # ------------------------------------------------------------------

     @staticmethod
     def generate_invoice_number(db: Session, today: Optional[date] = None) -> str:
          """
          Next invoice number for the month, INV-YYYYMM-NNNN.

          The sequence restarts every month.
          """
          today = today or date.today()
          prefix = f"INV-{today:%Y%m}-"
          last = (
               db.query(Invoice.invoice_number)
               .filter(Invoice.invoice_number.like(f"{prefix}%"))
               .order_by(Invoice.invoice_number.desc())
               .first()
          )
          sequence = int(last[0].rsplit("-", 1)[1]) + 1 if last else 1
          return f"{prefix}{sequence:04d}"

     @staticmethod
     def check_access(db: Session, invoice: Invoice, actor: dict) -> bool:
          """
          Raise PermissionDeniedError unless the actor may see the invoice.

          Returns True when the actor only has read access (tenants).
          """
          role = actor.get("role")
          if role == "tenant":
               if invoice.tenant_id != actor.get("id"):
                    raise PermissionDeniedError("You can only view your own invoices")
               return True
          if role == "landlord":
               landlord_id = db.query(Property.landlord_id).filter(Property.id == invoice.property_id).scalar()
               if landlord_id != actor.get("id"):
                    raise PermissionDeniedError("You can only manage invoices for your own properties")
               return False
          if role in STAFF_ROLES:
               return False
          raise PermissionDeniedError("Access denied")

     # ------------------------------------------------------------------
     # Creation
     # ------------------------------------------------------------------

     @staticmethod
     def create_invoice(
          db: Session,
          tenant_id: int,
          property_id: int,
          items: list[dict],
          due_date: date,
          created_by: int,
          lease_id: Optional[int] = None,
          issue_date: Optional[date] = None,
          tax_amount: Decimal = Decimal("0"),
          notes: Optional[str] = None,
          payment_terms: Optional[str] = None,
     ) -> Invoice:
          """
          Create a draft invoice awaiting approval.

          Args:
               db: SQLAlchemy database session
               tenant_id: ID of the tenant being billed
               property_id: ID of the property the charge relates to
               items: Line items as dicts with description, quantity, unit_price
                    and optionally amount (defaults to quantity x unit_price)
               due_date: Payment due date
               created_by: ID of the user creating the invoice

          Returns:
               Created Invoice object (flushed, not committed)

          Raises:
               ValidationError: If there are no items or the due date precedes the issue date
               NotFoundError: If the tenant or property doesn't exist
          """
          if not items:
               raise ValidationError("At least one invoice item is required", field="items")
          issue_date = issue_date or date.today()
          if due_date < issue_date:
               raise ValidationError("Due date cannot be before the issue date", field="due_date")

          if not db.query(User).filter(User.id == tenant_id).first():
               raise NotFoundError("Tenant", tenant_id)
          if not db.query(Property).filter(Property.id == property_id).first():
               raise NotFoundError("Property", property_id)

          invoice = Invoice(
               invoice_number=InvoiceService.generate_invoice_number(db, issue_date),
               issue_date=issue_date,
               due_date=due_date,
               tenant_id=tenant_id,
               property_id=property_id,
               lease_id=lease_id,
               tax_amount=to_decimal(tax_amount),
               paid_amount=Decimal("0"),
               status=InvoiceStatus.DRAFT.value,
               approval_status=ApprovalStatus.PENDING.value,
               created_by=created_by,
               notes=notes,
               payment_terms=payment_terms,
               approval_history=[],
          )
          invoice.items = [InvoiceService._build_item(item) for item in items]
          invoice.recalculate_totals()
          invoice.record_approval("submitted", created_by, "Invoice created")

          db.add(invoice)
          db.flush()  # Flush to get the ID without committing
          logger.info("Invoice %s created for tenant %s (total %s)", invoice.invoice_number, tenant_id, invoice.total_amount)
          return invoice

     @staticmethod
     def _build_item(item: dict) -> InvoiceItem:
          quantity = to_decimal(item.get("quantity", 1))
          unit_price = to_decimal(item.get("unit_price"))
          amount = item.get("amount")
          return InvoiceItem(
               description=item["description"],
               quantity=quantity,
               unit_price=unit_price,
               amount=to_decimal(amount if amount is not None else quantity * unit_price),
               period_start=item.get("period_start"),
               period_end=item.get("period_end"),
          )

     @staticmethod
     def update_invoice(db: Session, invoice: Invoice, changes: dict) -> Invoice:
          """Edit a draft invoice. Items, if given, replace the existing lines."""
          if invoice.status != InvoiceStatus.DRAFT.value:
               raise InvalidStateError("Only draft invoices can be edited")
          if "items" in changes and changes["items"] is not None:
               if not changes["items"]:
                    raise ValidationError("At least one invoice item is required", field="items")
               invoice.items = [InvoiceService._build_item(item) for item in changes["items"]]
          for field in ("due_date", "notes", "payment_terms"):
               if changes.get(field) is not None:
                    setattr(invoice, field, changes[field])
          if changes.get("tax_amount") is not None:
               invoice.tax_amount = to_decimal(changes["tax_amount"])
          invoice.recalculate_totals()
          db.flush()
          return invoice

     # ------------------------------------------------------------------
     # Workflow actions
     # ------------------------------------------------------------------

     @staticmethod
     def send_invoice(db: Session, invoice: Invoice, actor: dict) -> Invoice:
          if actor.get("role") not in BILLING_ROLES:
               raise PermissionDeniedError("Insufficient permissions to send invoices")
          # Approved invoices are still drafts until they go out
          if invoice.status != InvoiceStatus.DRAFT.value:
               raise InvalidStateError("Only draft or approved invoices can be sent")

          invoice.status = InvoiceStatus.SENT.value
          invoice.approval_status = ApprovalStatus.APPROVED.value
          invoice.sent_at = utcnow()
          invoice.record_approval("sent", actor["id"], f"Invoice sent by {actor.get('role')}")

          amount = format_currency(invoice.total_amount)
          NotificationService.create_notification(
               db,
               recipient_id=invoice.tenant_id,
               sender_id=actor["id"],
               type="invoice_created",
               title="New Invoice",
               message=(
                    f"Invoice {invoice.invoice_number} has been sent to you. Amount: {amount}. "
                    f"Due date: {format_date(invoice.due_date)}. Please make payment by the due date."
               ),
               related_document_id=invoice.id,
               related_document_model="Invoice",
               action_required=True,
               action_url=f"/tenant/invoices/{invoice.id}",
          )
          NotificationService.create_notification(
               db,
               recipient_id=actor["id"],
               type="general",
               message=f"Invoice {invoice.invoice_number} has been successfully sent to {invoice.tenant.name}.",
               related_document_id=invoice.id,
               related_document_model="Invoice",
          )
          InvoiceService._email_invoice(invoice)
          logger.info("Invoice %s sent by user %s", invoice.invoice_number, actor["id"])
          return invoice

     @staticmethod
     def _email_invoice(invoice: Invoice) -> None:
          if not email.is_email_configured():
               return
          # Imported here: pdf_service pulls in reportlab
          from services.pdf_service import generate_invoice_pdf
          try:
               email.send_invoice_email(invoice, generate_invoice_pdf(invoice))
          except ExternalServiceError as exc:
               logger.warning("Invoice %s sent but email delivery failed: %s", invoice.invoice_number, exc.message)

     @staticmethod
     def approve_invoice(db: Session, invoice: Invoice, actor: dict, notes: Optional[str] = None) -> Invoice:
          if actor.get("role") not in STAFF_ROLES:
               raise PermissionDeniedError("Only managers and administrators can approve invoices")
          if invoice.approval_status != ApprovalStatus.PENDING.value:
               raise InvalidStateError("Only pending invoices can be approved")

          notes = notes or "Invoice approved"
          invoice.approval_status = ApprovalStatus.APPROVED.value
          invoice.approved_by = actor["id"]
          invoice.approved_at = utcnow()
          invoice.approval_notes = notes
          invoice.record_approval("approved", actor["id"], notes)

          NotificationService.create_notification(
               db,
               recipient_id=invoice.tenant_id,
               sender_id=actor["id"],
               type="general",
               message=f"Your invoice {invoice.invoice_number} has been approved and will be sent shortly.",
               related_document_id=invoice.id,
               related_document_model="Invoice",
          )
          logger.info("Invoice %s approved by user %s", invoice.invoice_number, actor["id"])
          return invoice

     @staticmethod
     def reject_invoice(db: Session, invoice: Invoice, actor: dict, reason: Optional[str] = None) -> Invoice:
          if actor.get("role") not in STAFF_ROLES:
               raise PermissionDeniedError("Only managers and administrators can reject invoices")
          if invoice.approval_status != ApprovalStatus.PENDING.value:
               raise InvalidStateError("Only pending invoices can be rejected")

          reason = reason or "Invoice rejected"
          invoice.approval_status = ApprovalStatus.REJECTED.value
          invoice.rejection_reason = reason
          invoice.record_approval("rejected", actor["id"], reason)

          NotificationService.create_notification(
               db,
               recipient_id=invoice.created_by or invoice.tenant_id,
               sender_id=actor["id"],
               type="general",
               message=f"Invoice {invoice.invoice_number} has been rejected. Reason: {reason}",
               related_document_id=invoice.id,
               related_document_model="Invoice",
          )
          logger.info("Invoice %s rejected by user %s", invoice.invoice_number, actor["id"])
          return invoice

     @staticmethod
     def mark_paid(
          db: Session,
          invoice: Invoice,
          actor: dict,
          amount: Optional[Decimal] = None,
          payment_date: Optional[date] = None,
          payment_method: str = "cash",
          reference: Optional[str] = None,
     ) -> Payment:
          """
          Record a (possibly partial) manual payment against a sent invoice.

          Returns:
               The completed Payment record

          Raises:
               PermissionDeniedError: If the actor is a tenant
               InvalidStateError: If the invoice is not sent, viewed or overdue
               ValidationError: If the amount is not positive or exceeds the outstanding balance
          """
          if actor.get("role") not in BILLING_ROLES:
               raise PermissionDeniedError("Insufficient permissions to mark invoices as paid")
          if invoice.status not in OPEN_STATUSES:
               raise InvalidStateError("Only sent, viewed, or overdue invoices can be marked as paid")

          outstanding = invoice.outstanding_amount
          amount = to_decimal(amount) if amount is not None else outstanding
          if amount <= 0:
               raise ValidationError("Payment amount must be greater than zero", field="amount")
          if amount > outstanding:
               raise ValidationError(
                    f"Payment amount cannot exceed outstanding balance of {format_currency(outstanding)}",
                    field="amount",
               )

          now = utcnow()
          payment = Payment(
               receipt_number=PaymentService.generate_receipt_number(db),
               tenant_id=invoice.tenant_id,
               property_id=invoice.property_id,
               lease_id=invoice.lease_id,
               invoice_id=invoice.id,
               amount=amount,
               payment_date=payment_date or date.today(),
               payment_method=payment_method or "cash",
               payment_type="rent",
               reference_number=reference or f"Manual payment for {invoice.invoice_number}",
               description=f"Payment for invoice {invoice.invoice_number}",
               status=PaymentStatus.COMPLETED.value,
               approval_status="approved",
               approved_by=actor["id"],
               approved_at=now,
               recorded_by=actor["id"],
               approval_history=[],
          )
          payment.record_approval("approved", actor["id"], f"Manual payment recorded by {actor.get('role')}")
          db.add(payment)

          invoice.apply_payment(amount)
          invoice.record_approval("payment_recorded", actor["id"], f"Payment of {format_currency(amount)} recorded")
          db.flush()

          fully_paid = invoice.status == InvoiceStatus.PAID.value
          formatted = format_currency(amount)
          if fully_paid:
               tenant_message = (f"Your payment of {formatted} for invoice {invoice.invoice_number} has been received "
                                 f"and processed. Invoice is now fully paid.")
          else:
               tenant_message = (f"Your payment of {formatted} for invoice {invoice.invoice_number} has been received. "
                                 f"Remaining balance: {format_currency(invoice.outstanding_amount)}.")
          NotificationService.create_notification(
               db,
               recipient_id=invoice.tenant_id,
               sender_id=actor["id"],
               type="general",
               message=tenant_message,
               related_document_id=payment.id,
               related_document_model="Payment",
          )
          NotificationService.create_notification(
               db,
               recipient_id=actor["id"],
               type="general",
               message=(
                    f"Payment of {formatted} recorded for invoice {invoice.invoice_number} from {invoice.tenant.name}. "
                    + ("Invoice is now fully paid." if fully_paid else "Partial payment recorded.")
               ),
               related_document_id=payment.id,
               related_document_model="Payment",
          )
          logger.info("Payment %s of %s recorded on invoice %s", payment.receipt_number, amount, invoice.invoice_number)
          return payment

     @staticmethod
     def cancel_invoice(db: Session, invoice: Invoice, actor: dict, reason: Optional[str] = None) -> Invoice:
          if actor.get("role") not in STAFF_ROLES:
               raise PermissionDeniedError("Only managers and administrators can cancel invoices")
          if invoice.status == InvoiceStatus.PAID.value:
               raise InvalidStateError("Paid invoices cannot be cancelled")

          reason = reason or "Invoice cancelled"
          previous_status = invoice.status
          invoice.status = InvoiceStatus.CANCELLED.value
          invoice.approval_status = ApprovalStatus.REJECTED.value
          invoice.rejection_reason = reason
          invoice.record_approval("cancelled", actor["id"], reason)

          # The tenant only hears about invoices they were actually sent
          if previous_status in OPEN_STATUSES:
               NotificationService.create_notification(
                    db,
                    recipient_id=invoice.tenant_id,
                    sender_id=actor["id"],
                    type="general",
                    message=(f"Invoice {invoice.invoice_number} has been cancelled. "
                             f"No payment is required. Reason: {reason}"),
                    related_document_id=invoice.id,
                    related_document_model="Invoice",
               )
          NotificationService.create_notification(
               db,
               recipient_id=actor["id"],
               type="general",
               message=f"Invoice {invoice.invoice_number} for {invoice.tenant.name} has been cancelled successfully.",
               related_document_id=invoice.id,
               related_document_model="Invoice",
          )
          logger.info("Invoice %s cancelled by user %s", invoice.invoice_number, actor["id"])
          return invoice

     @staticmethod
     def send_reminder(db: Session, invoice: Invoice, actor: dict, today: Optional[date] = None) -> int:
          """Notify the tenant about an unpaid invoice. Returns the new reminder count."""
          if actor.get("role") not in BILLING_ROLES:
               raise PermissionDeniedError("Insufficient permissions to send reminders")
          if invoice.status not in OPEN_STATUSES:
               raise InvalidStateError("Reminders can only be sent for sent, viewed, or overdue invoices")

          today = today or date.today()
          invoice.reminders_sent = (invoice.reminders_sent or 0) + 1
          invoice.last_reminder_at = utcnow()
          invoice.record_approval("reminder_sent", actor["id"], f"Reminder #{invoice.reminders_sent} sent")

          amount = format_currency(invoice.outstanding_amount)
          if invoice.status == InvoiceStatus.OVERDUE.value:
               days_overdue = max(0, (today - invoice.due_date).days)
               message = (f"PAYMENT REMINDER: Invoice {invoice.invoice_number} is {days_overdue} days overdue. "
                          f"Amount due: {amount}. Please make payment immediately to avoid late fees.")
          else:
               message = (f"PAYMENT REMINDER: Invoice {invoice.invoice_number} is due on {format_date(invoice.due_date)}. "
                          f"Amount due: {amount}. Please make payment by the due date.")
          NotificationService.create_notification(
               db,
               recipient_id=invoice.tenant_id,
               sender_id=actor["id"],
               type="payment_due",
               title="Payment Reminder",
               message=message,
               related_document_id=invoice.id,
               related_document_model="Invoice",
               action_required=True,
               priority="high" if invoice.status == InvoiceStatus.OVERDUE.value else "medium",
          )
          NotificationService.create_notification(
               db,
               recipient_id=actor["id"],
               type="general",
               message=(f"Payment reminder sent to {invoice.tenant.name} for invoice {invoice.invoice_number}. "
                        f"This is reminder #{invoice.reminders_sent}."),
               related_document_id=invoice.id,
               related_document_model="Invoice",
          )
          return invoice.reminders_sent

     @staticmethod
     def duplicate_invoice(db: Session, invoice: Invoice, actor: dict) -> Invoice:
          if actor.get("role") not in BILLING_ROLES:
               raise PermissionDeniedError("Insufficient permissions to duplicate invoices")

          today = date.today()
          copy = InvoiceService.create_invoice(
               db,
               tenant_id=invoice.tenant_id,
               property_id=invoice.property_id,
               lease_id=invoice.lease_id,
               items=[
                    {
                         "description": item.description,
                         "quantity": item.quantity or 1,
                         "unit_price": item.unit_price,
                         "amount": item.amount,
                    }
                    for item in invoice.items
               ],
               issue_date=today,
               due_date=today + timedelta(days=DUPLICATE_DUE_DAYS),
               created_by=actor["id"],
               tax_amount=invoice.tax_amount or Decimal("0"),
               notes=invoice.notes,
               payment_terms=invoice.payment_terms,
          )
          copy.approval_history = []
          copy.record_approval("submitted", actor["id"], f"Duplicated from invoice {invoice.invoice_number}")

          NotificationService.create_notification(
               db,
               recipient_id=actor["id"],
               type="general",
               message=f"Invoice {invoice.invoice_number} has been duplicated as {copy.invoice_number}.",
               related_document_id=copy.id,
               related_document_model="Invoice",
          )
          return copy

     @staticmethod
     def mark_viewed(invoice: Invoice, actor: dict) -> None:
          """A tenant opening a sent invoice moves it to viewed."""
          if actor.get("role") == "tenant" and invoice.status == InvoiceStatus.SENT.value:
               invoice.status = InvoiceStatus.VIEWED.value

     # ------------------------------------------------------------------
     # Scheduled jobs
     # ------------------------------------------------------------------

     @staticmethod
     def generate_monthly_invoices(db: Session, today: Optional[date] = None) -> list[Invoice]:
          """
          Generate next month's rent invoices for active leases.

          This is called by the scheduled job. A lease is billed when it has
          started by the first of next month and has not ended yet, and only
          if no rent line exists for that period.

          Returns:
               List of created Invoice objects
          """
          today = today or date.today()
          period_start = first_of_next_month(today)
          period_end = add_months(period_start, 1) - timedelta(days=1)
          due_date = period_start.replace(day=MONTHLY_RENT_DUE_DAY)

          leases = (
               db.query(Lease)
               .filter(
                    Lease.status == LeaseStatus.ACTIVE.value,
                    Lease.start_date <= period_start,
                    Lease.end_date >= today,
               )
               .all()
          )

          created_invoices = []
          for lease in leases:
               existing = (
                    db.query(Invoice)
                    .join(InvoiceItem, InvoiceItem.invoice_id == Invoice.id)
                    .filter(Invoice.lease_id == lease.id, InvoiceItem.period_start == period_start)
                    .first()
               )
               if existing:
                    continue

               invoice = InvoiceService.create_invoice(
                    db,
                    tenant_id=lease.tenant_id,
                    property_id=lease.property_id,
                    lease_id=lease.id,
                    items=[{
                         "description": "Monthly Rent",
                         "quantity": 1,
                         "unit_price": lease.monthly_rent,
                         "period_start": period_start,
                         "period_end": period_end,
                    }],
                    issue_date=today,
                    due_date=due_date,
                    created_by=lease.landlord_id,
               )
               NotificationService.create_notification(
                    db,
                    recipient_id=lease.landlord_id,
                    type="system",
                    message=f"New rent invoice generated for {lease.tenant.name}",
                    related_document_id=invoice.id,
                    related_document_model="Invoice",
               )
               created_invoices.append(invoice)

          logger.info("Generated %s monthly invoices for period starting %s", len(created_invoices), period_start)
          return created_invoices

     @staticmethod
     def mark_overdue_invoices(db: Session, today: Optional[date] = None) -> int:
          """Move sent/viewed invoices past their due date to overdue; returns the count."""
          today = today or date.today()
          invoices = (
               db.query(Invoice)
               .filter(
                    Invoice.status.in_((InvoiceStatus.SENT.value, InvoiceStatus.VIEWED.value)),
                    Invoice.due_date < today,
               )
               .all()
          )
          for invoice in invoices:
               invoice.mark_as_overdue()
          db.flush()
          logger.info("Marked %s invoices overdue", len(invoices))
          return len(invoices)

     @staticmethod
     def tenant_summary(db: Session, tenant_id: int, landlord_id: Optional[int] = None) -> dict:
          """Totals of a tenant's invoices grouped by status, optionally limited to one landlord's properties."""
          query = db.query(Invoice).filter(Invoice.tenant_id == tenant_id)
          if landlord_id is not None:
               query = query.join(Property, Invoice.property_id == Property.id).filter(Property.landlord_id == landlord_id)
          invoices = query.all()
          summary = {"total_invoices": len(invoices), "total_amount": Decimal("0"), "outstanding": Decimal("0")}
          for status in InvoiceStatus:
               matching = [inv for inv in invoices if inv.status == status.value]
               summary[status.value] = {
                    "count": len(matching),
                    "amount": sum((Decimal(inv.total_amount) for inv in matching), Decimal("0")),
               }
          for inv in invoices:
               summary["total_amount"] += Decimal(inv.total_amount)
               if inv.status != InvoiceStatus.CANCELLED.value:
                    summary["outstanding"] += inv.outstanding_amount
          return summary
