# models/maintenance.py
import math
from datetime import date

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, utcnow

PRIORITIES = ("Low", "Medium", "High")
STATUSES = ("Pending", "In Progress", "Completed", "Cancelled")
URGENCIES = ("Emergency", "Urgent", "Normal", "Low")
CATEGORIES = ("Plumbing", "Electrical", "HVAC", "Appliances", "Structural", "Pest Control", "Cleaning", "Other")
CLOSED_STATUSES = ("Completed", "Cancelled")


class MaintenanceRequest(Base):
     """
     MaintenanceRequest model - a repair or upkeep job reported against a
     property.
     """
     __tablename__ = "maintenance_requests"

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
     landlord_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

     title = Column(String(100), nullable=False)
     description = Column(String(1000), nullable=False)
     priority = Column(String(20), default="Medium", nullable=False, index=True)
     status = Column(String(20), default="Pending", nullable=False, index=True)
     category = Column(String(50), default="Other", nullable=False)
     urgency = Column(String(20), default="Normal", nullable=False)

     date_reported = Column(DateTime, default=utcnow, nullable=False)
     date_started = Column(DateTime, nullable=True)
     date_completed = Column(DateTime, nullable=True)
     due_date = Column(Date, nullable=True)

     images = Column(JSON, default=list, nullable=False)
     estimated_cost = Column(Numeric(12, 2), nullable=True)
     actual_cost = Column(Numeric(12, 2), nullable=True)
     is_emergency = Column(Boolean, default=False, nullable=False)

     created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
     updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)

     # Tenant feedback once the job is done
     satisfaction_rating = Column(Integer, nullable=True)
     feedback = Column(Text, nullable=True)

     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     premises = relationship("Property")
     tenant = relationship("User", foreign_keys=[tenant_id])
     landlord = relationship("User", foreign_keys=[landlord_id])
     notes = relationship("MaintenanceNote", back_populates="request", cascade="all, delete-orphan",
                          order_by="MaintenanceNote.id")

     def __repr__(self):
          return f"<MaintenanceRequest(id={self.id}, title='{self.title}', status='{self.status}')>"

     @property
     def is_overdue(self) -> bool:
          if self.due_date is None or self.status in CLOSED_STATUSES:
               return False
          return date.today() > self.due_date

     @property
     def days_open(self) -> int:
          end = self.date_completed or utcnow()
          return math.ceil((end - self.date_reported).total_seconds() / 86400)

     def refresh_emergency_flag(self) -> None:
          self.is_emergency = self.priority == "High" or self.urgency == "Emergency"


class MaintenanceNote(Base):
     __tablename__ = "maintenance_notes"

     id = Column(Integer, primary_key=True, autoincrement=True)
     request_id = Column(Integer, ForeignKey("maintenance_requests.id", ondelete="CASCADE"), nullable=False, index=True)
     author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
     content = Column(String(500), nullable=False)
     is_internal = Column(Boolean, default=False, nullable=False)
     created_at = Column(DateTime, default=utcnow, nullable=False)

     request = relationship("MaintenanceRequest", back_populates="notes")
     author = relationship("User")
