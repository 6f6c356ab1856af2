# models/user.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class User(Base):
     """
     User model - central authentication table for landlords, tenants,
     managers and admins.
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(200), nullable=False)
     email = Column(String(255), unique=True, nullable=False, index=True)
     password = Column(String(255), nullable=False)
     phone = Column(String(50), nullable=True)
     role = Column(String(50), default="tenant", nullable=False)  # landlord, tenant, manager, admin
     is_active = Column(Boolean, default=True, nullable=False)

     # Tenant-specific
     current_property_id = Column(Integer, nullable=True)
     current_lease_id = Column(Integer, nullable=True)

     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     properties = relationship("Property", back_populates="landlord", foreign_keys="Property.landlord_id")

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
