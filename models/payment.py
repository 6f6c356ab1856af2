# models/payment.py
import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, utcnow

PAYMENT_METHODS = ("cash", "bank_transfer", "card", "mobile_money", "cheque", "manual")
PAYMENT_TYPES = ("rent", "deposit", "utilities", "maintenance", "fees", "other")


class PaymentStatus(str, enum.Enum):
     PENDING = "pending"
     COMPLETED = "completed"
     FAILED = "failed"
     CANCELLED = "cancelled"
     VERIFIED = "verified"


class Payment(Base):
     """
     Payment model - money received from a tenant, optionally against an
     invoice or lease.
     """
     __tablename__ = "payments"

     id = Column(Integer, primary_key=True, autoincrement=True)
     receipt_number = Column(String(50), unique=True, nullable=False, index=True)

     amount = Column(Numeric(12, 2), nullable=False)
     payment_date = Column(Date, default=date.today, nullable=False, index=True)
     payment_method = Column(String(30), default="cash", nullable=False)
     payment_type = Column(String(30), default="rent", nullable=False)

     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=True, index=True)
     lease_id = Column(Integer, ForeignKey("leases.id", ondelete="SET NULL"), nullable=True, index=True)
     invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True)

     status = Column(String(20), default=PaymentStatus.PENDING.value, nullable=False, index=True)

     # Approval
     approval_status = Column(String(20), default="pending", nullable=False)
     approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
     approved_at = Column(DateTime, nullable=True)
     approval_notes = Column(Text, nullable=True)
     rejection_reason = Column(Text, nullable=True)
     approval_history = Column(JSON, default=list, nullable=False)

     recorded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
     description = Column(String(255), nullable=True)
     notes = Column(Text, nullable=True)
     reference_number = Column(String(100), nullable=True)
     late_fee = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
     due_date = Column(Date, nullable=True)

     # Cancellation
     cancelled_by = Column(Integer, ForeignKey("users.id"), nullable=True)
     cancelled_at = Column(DateTime, nullable=True)
     cancellation_reason = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     tenant = relationship("User", foreign_keys=[tenant_id])
     premises = relationship("Property")
     lease = relationship("Lease")
     invoice = relationship("Invoice", back_populates="payments")

     def __repr__(self):
          return f"<Payment(receipt='{self.receipt_number}', amount={self.amount}, status='{self.status}')>"

     def record_approval(self, action: str, user_id: int, notes=None) -> None:
          self.append_history("approval_history", {
               "action": action,
               "by": user_id,
               "at": utcnow().isoformat(),
               "notes": notes,
          })
