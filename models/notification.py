# models/notification.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, utcnow

NOTIFICATION_TYPES = (
     "payment_submitted",
     "lease_approved",
     "maintenance_request",
     "invoice_created",
     "payment_due",
     "general",
     "tenant_registration",
     "property_request",
     "lease_request",
     "property_inquiry",
     "account_approved",
     "property_approved",
     "property_request_approved",
     "request_rejected",
     "system",
)
RELATED_MODELS = ("Payment", "Lease", "Property", "Maintenance", "Invoice", "PropertyRequest")
PRIORITIES = ("low", "medium", "high", "urgent")


class Notification(Base):
     """
     Notification model - a message alerting a user to something that
     happened or to an action they need to take.
     """
     __tablename__ = "notifications"

     id = Column(Integer, primary_key=True, autoincrement=True)
     recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
     sender_id = Column(Integer, ForeignKey("users.id"), nullable=True)

     type = Column(String(50), nullable=False, index=True)
     title = Column(String(200), default="Notification", nullable=False)
     message = Column(Text, nullable=False)

     # What the notification points at
     related_document_id = Column(Integer, nullable=True)
     related_document_model = Column(String(50), nullable=True)
     related_property_id = Column(Integer, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True)
     related_property_request_id = Column(Integer, ForeignKey("property_requests.id", ondelete="SET NULL"), nullable=True)
     related_lease_id = Column(Integer, ForeignKey("leases.id", ondelete="SET NULL"), nullable=True)

     action_required = Column(Boolean, default=False, nullable=False)
     action_url = Column(String(500), nullable=True)

     is_read = Column(Boolean, default=False, nullable=False, index=True)
     read_at = Column(DateTime, nullable=True)
     priority = Column(String(20), default="medium", nullable=False)

     created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

     recipient = relationship("User", foreign_keys=[recipient_id])
     sender = relationship("User", foreign_keys=[sender_id])

     def __repr__(self):
          return f"<Notification(id={self.id}, type='{self.type}', recipient_id={self.recipient_id}, read={self.is_read})>"

     def mark_as_read(self) -> None:
          if not self.is_read:
               self.is_read = True
               self.read_at = utcnow()
