# models/property.py
from sqlalchemy import Column, Integer, String, Numeric, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, utcnow

PROPERTY_TYPES = ("Apartment", "House", "Condo", "Townhouse", "Commercial")


class Property(Base):
     """
     Property model - a rentable house, apartment or commercial unit
     owned by a landlord.
     """
     __tablename__ = "properties"

     id = Column(Integer, primary_key=True, autoincrement=True)
     address = Column(String(255), nullable=False)
     property_type = Column(String(50), nullable=False)  # Apartment, House, Condo, Townhouse, Commercial
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     bedrooms = Column(Integer, nullable=True)
     bathrooms = Column(Integer, nullable=True)

     landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     is_available = Column(Boolean, default=True, nullable=False, index=True)

     description = Column(Text, nullable=True)
     images = Column(JSON, default=list, nullable=False)  # List of image URLs

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     landlord = relationship("User", back_populates="properties", foreign_keys=[landlord_id])
     leases = relationship("Lease", back_populates="premises", cascade="all, delete-orphan")

     def __repr__(self):
          return f"<Property(id={self.id}, address='{self.address}')>"

     @property
     def active_lease_count(self) -> int:
          return sum(1 for lease in self.leases if lease.status == "active")
