# models/lease.py
import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, Date, Boolean, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, utcnow
from utils.dates import add_months


class LeaseStatus(str, enum.Enum):
     """Lease workflow states."""
     DRAFT = "draft"                          # Created by landlord, not sent to tenant
     PENDING_SIGNATURE = "pending_signature"  # Sent to tenant, awaiting signature
     SIGNED = "signed"                        # Tenant signed, awaiting first payment
     ACTIVE = "active"                        # First payment made
     TERMINATED = "terminated"
     EXPIRED = "expired"


class Lease(Base):
     """
     Lease model - rental agreement between a tenant and a landlord's property.
     """
     __tablename__ = "leases"

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     property_request_id = Column(Integer, ForeignKey("property_requests.id"), nullable=True)

     # Lease terms
     start_date = Column(Date, nullable=False)
     end_date = Column(Date, nullable=False)
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     security_deposit = Column(Numeric(12, 2), nullable=False)
     payment_due_day = Column(Integer, default=1, nullable=False)

     status = Column(String(50), default=LeaseStatus.DRAFT.value, nullable=False, index=True)

     # Signatures
     tenant_signed = Column(Boolean, default=False, nullable=False)
     tenant_signed_at = Column(DateTime, nullable=True)
     tenant_signature_data = Column(Text, nullable=True)
     tenant_signature_ip = Column(String(64), nullable=True)
     landlord_signed = Column(Boolean, default=False, nullable=False)
     landlord_signed_at = Column(DateTime, nullable=True)
     landlord_signature_data = Column(Text, nullable=True)
     landlord_signature_ip = Column(String(64), nullable=True)

     # Payment tracking
     next_payment_due = Column(Date, nullable=True, index=True)
     last_payment_date = Column(Date, nullable=True)
     total_paid = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
     balance_due = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)

     # First payment (security deposit + first month)
     first_payment_required = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
     first_payment_made = Column(Boolean, default=False, nullable=False)
     first_payment_date = Column(Date, nullable=True)

     # Document
     document_url = Column(String(500), nullable=True)
     document_name = Column(String(255), nullable=True)
     document_uploaded_at = Column(DateTime, nullable=True)

     terms = Column(JSON, default=dict, nullable=False)  # pet/smoking policy, utilities, special conditions
     status_history = Column(JSON, default=list, nullable=False)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     premises = relationship("Property", back_populates="leases")
     tenant = relationship("User", foreign_keys=[tenant_id])
     landlord = relationship("User", foreign_keys=[landlord_id])
     invoices = relationship("Invoice", back_populates="lease")

     def __repr__(self):
          return f"<Lease(id={self.id}, tenant_id={self.tenant_id}, property_id={self.property_id}, status='{self.status}')>"

     @property
     def is_fully_signed(self) -> bool:
          return bool(self.tenant_signed and self.landlord_signed)

     @property
     def ready_for_activation(self) -> bool:
          return self.is_fully_signed and bool(self.first_payment_made)

     def record_status(self, status: str, changed_by, note: str) -> None:
          self.status = status
          self.append_history("status_history", {
               "status": status,
               "changed_at": utcnow().isoformat(),
               "changed_by": changed_by,
               "note": note,
          })

     def send_to_tenant(self, ip_address: str = "") -> bool:
          """Sending counts as the landlord's signature."""
          if self.status != LeaseStatus.DRAFT.value:
               return False
          self.landlord_signed = True
          self.landlord_signed_at = utcnow()
          self.landlord_signature_ip = ip_address or None
          self.record_status(LeaseStatus.PENDING_SIGNATURE.value, self.landlord_id, "Lease sent to tenant for signature")
          return True

     def sign_by_tenant(self, signature_data: str, ip_address: str, signer_name: str = "") -> bool:
          if self.status != LeaseStatus.PENDING_SIGNATURE.value:
               return False
          self.tenant_signed = True
          self.tenant_signed_at = utcnow()
          self.tenant_signature_data = signature_data
          self.tenant_signature_ip = ip_address
          self.first_payment_required = Decimal(self.security_deposit) + Decimal(self.monthly_rent)
          self.balance_due = self.first_payment_required
          note = f"Lease signed by tenant: {signer_name}" if signer_name else "Lease signed by tenant"
          self.record_status(LeaseStatus.SIGNED.value, self.tenant_id, note)
          return True

     def record_first_payment(self, amount: Decimal, paid_on: date) -> bool:
          if self.status != LeaseStatus.SIGNED.value or Decimal(amount) < Decimal(self.first_payment_required):
               return False
          self.first_payment_made = True
          self.first_payment_date = paid_on
          self.last_payment_date = paid_on
          self.total_paid = Decimal(self.total_paid or 0) + Decimal(amount)
          self.balance_due = max(Decimal("0"), Decimal(self.balance_due or 0) - Decimal(amount))
          self.next_payment_due = add_months(self.start_date, 1, day=self.payment_due_day)
          self.record_status(LeaseStatus.ACTIVE.value, self.tenant_id, f"First payment of {amount} received")
          return True
