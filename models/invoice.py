# models/invoice.py
import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class InvoiceStatus(str, enum.Enum):
     """Enumeration for invoice delivery/payment status."""
     DRAFT = "draft"
     SENT = "sent"
     VIEWED = "viewed"
     PAID = "paid"
     OVERDUE = "overdue"
     CANCELLED = "cancelled"


class ApprovalStatus(str, enum.Enum):
     PENDING = "pending"
     APPROVED = "approved"
     REJECTED = "rejected"


# Invoices a tenant has been told about and can still pay
OPEN_STATUSES = (InvoiceStatus.SENT.value, InvoiceStatus.VIEWED.value, InvoiceStatus.OVERDUE.value)


class Invoice(Base):
     """
     Invoice model - billing records for tenants based on their leases.

     This model tracks rent, utility bills, and other charges associated
     with a tenant's lease agreement, plus the approval trail a manager
     leaves on it.
     """
     __tablename__ = "invoices"

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_number = Column(String(50), unique=True, nullable=False, index=True)

     issue_date = Column(Date, default=date.today, nullable=False)
     due_date = Column(Date, nullable=False, index=True)

     # Foreign keys
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     lease_id = Column(Integer, ForeignKey("leases.id", ondelete="SET NULL"), nullable=True, index=True)

     # Amounts
     subtotal = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
     tax_amount = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
     total_amount = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
     paid_amount = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)

     status = Column(String(20), default=InvoiceStatus.DRAFT.value, nullable=False, index=True)

     # Approval
     approval_status = Column(String(20), default=ApprovalStatus.PENDING.value, nullable=False, index=True)
     approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
     approved_at = Column(DateTime, nullable=True)
     approval_notes = Column(Text, nullable=True)
     rejection_reason = Column(Text, nullable=True)
     approval_history = Column(JSON, default=list, nullable=False)  # [{action, by, at, notes}]

     created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
     notes = Column(Text, nullable=True)
     payment_terms = Column(String(255), nullable=True)

     # Delivery
     sent_at = Column(DateTime, nullable=True)
     reminders_sent = Column(Integer, default=0, nullable=False)
     last_reminder_at = Column(DateTime, nullable=True)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
                          order_by="InvoiceItem.id")
     tenant = relationship("User", foreign_keys=[tenant_id])
     creator = relationship("User", foreign_keys=[created_by])
     premises = relationship("Property")
     lease = relationship("Lease", back_populates="invoices")
     payments = relationship("Payment", back_populates="invoice")

     def __repr__(self):
          return f"<Invoice(number='{self.invoice_number}', total={self.total_amount}, status='{self.status}', due_date={self.due_date})>"

     @property
     def outstanding_amount(self) -> Decimal:
          return max(Decimal("0"), Decimal(self.total_amount or 0) - Decimal(self.paid_amount or 0))

     @property
     def is_overdue(self) -> bool:
          """Check if invoice is past due date and unpaid."""
          return self.status != InvoiceStatus.PAID.value and self.due_date < date.today()

     def recalculate_totals(self) -> None:
          """Fill in missing line amounts and recompute subtotal and total."""
          subtotal = Decimal("0")
          for item in self.items:
               if item.amount is None:
                    item.amount = Decimal(item.quantity or 0) * Decimal(item.unit_price or 0)
               subtotal += Decimal(item.amount)
          self.subtotal = subtotal
          self.total_amount = subtotal + Decimal(self.tax_amount or 0)

     def record_approval(self, action: str, user_id: int, notes=None) -> None:
          self.append_history("approval_history", {
               "action": action,
               "by": user_id,
               "at": utcnow().isoformat(),
               "notes": notes,
          })

     def apply_payment(self, amount: Decimal) -> None:
          """Add a payment to paid_amount, marking the invoice paid once settled."""
          self.paid_amount = Decimal(self.paid_amount or 0) + Decimal(amount)
          if Decimal(self.paid_amount) >= Decimal(self.total_amount):
               self.status = InvoiceStatus.PAID.value

     def reverse_payment(self, amount: Decimal) -> None:
          """Take a cancelled payment back out of paid_amount and reopen a paid invoice."""
          paid = Decimal(self.paid_amount or 0)
          self.paid_amount = paid - min(Decimal(amount), paid)
          if self.status == InvoiceStatus.PAID.value and self.outstanding_amount > 0:
               self.status = InvoiceStatus.OVERDUE.value if self.due_date < date.today() else InvoiceStatus.SENT.value

     def mark_as_overdue(self) -> None:
          """Mark the invoice as overdue."""
          self.status = InvoiceStatus.OVERDUE.value


class InvoiceItem(Base):
     """A single billed line on an invoice."""
     __tablename__ = "invoice_items"

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
     description = Column(String(255), nullable=False)
     quantity = Column(Numeric(10, 2), default=Decimal("1"), nullable=False)
     unit_price = Column(Numeric(12, 2), nullable=False)
     amount = Column(Numeric(12, 2), nullable=False)
     # Billing period for recurring rent lines
     period_start = Column(Date, nullable=True)
     period_end = Column(Date, nullable=True)

     invoice = relationship("Invoice", back_populates="items")

     def __repr__(self):
          return f"<InvoiceItem(description='{self.description}', amount={self.amount})>"
