# models/property_request.py
"""
PropertyRequest model - a tenant asking to rent an existing property,
asking a landlord to list a new one, or requesting a lease.
"""
import enum
from datetime import timedelta

from sqlalchemy import Column, Integer, String, Numeric, Text, Boolean, Date, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, utcnow

REQUEST_LIFETIME_DAYS = 30


class PropertyRequestStatus(str, enum.Enum):
     PENDING = "pending"
     APPROVED = "approved"
     REJECTED = "rejected"
     PROPERTY_CREATED = "property_created"
     LEASE_REQUESTED = "lease_requested"


class PropertyRequestType(str, enum.Enum):
     EXISTING_PROPERTY = "existing_property"
     NEW_PROPERTY = "new_property"
     LEASE_REQUEST = "lease_request"


def _default_expiry():
     return utcnow() + timedelta(days=REQUEST_LIFETIME_DAYS)


class PropertyRequest(Base):
     __tablename__ = "property_requests"

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     request_type = Column(String(50), nullable=False, index=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=True, index=True)
     landlord_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

     # Details for properties that are not listed yet
     address = Column(String(255), nullable=True)
     estimated_rent = Column(Numeric(12, 2), nullable=True)
     bedrooms = Column(Integer, nullable=True)
     bathrooms = Column(Integer, nullable=True)
     property_type = Column(String(50), nullable=True)
     description = Column(Text, nullable=True)
     landlord_email = Column(String(255), nullable=True)
     landlord_phone = Column(String(50), nullable=True)

     status = Column(String(50), default=PropertyRequestStatus.PENDING.value, nullable=False, index=True)
     messages = Column(JSON, default=list, nullable=False)  # [{sender, message, timestamp}]

     # Landlord's response
     response_message = Column(Text, nullable=True)
     responded_at = Column(DateTime, nullable=True)
     next_steps = Column(Text, nullable=True)

     # Move-in preferences
     preferred_move_in = Column(Date, nullable=True)
     lease_duration_months = Column(Integer, default=12, nullable=False)
     additional_requests = Column(Text, nullable=True)

     is_urgent = Column(Boolean, default=False, nullable=False)
     expires_at = Column(DateTime, default=_default_expiry, nullable=False)

     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     tenant = relationship("User", foreign_keys=[tenant_id])
     landlord = relationship("User", foreign_keys=[landlord_id])
     premises = relationship("Property")

     def __repr__(self):
          return f"<PropertyRequest(id={self.id}, type='{self.request_type}', status='{self.status}')>"

     def add_message(self, sender_id: int, message: str) -> None:
          self.append_history("messages", {
               "sender": sender_id,
               "message": message,
               "timestamp": utcnow().isoformat(),
          })

     def approve(self, landlord_id: int, response_message: str, next_steps=None) -> None:
          self.status = PropertyRequestStatus.APPROVED.value
          self.response_message = response_message
          self.next_steps = next_steps
          self.responded_at = utcnow()
          if response_message:
               self.add_message(landlord_id, response_message)

     def reject(self, landlord_id: int, reason: str) -> None:
          self.status = PropertyRequestStatus.REJECTED.value
          self.response_message = reason
          self.responded_at = utcnow()
          self.add_message(landlord_id, reason)
