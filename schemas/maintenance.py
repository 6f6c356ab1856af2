# schemas/maintenance.py
"""
Pydantic schemas for maintenance requests, notes and feedback.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


class MaintenanceCreate(BaseModel):
     property_id: int = Field(..., gt=0)
     tenant_id: Optional[int] = Field(None, gt=0, description="Ignored for tenants, who always file for themselves")
     title: str = Field(..., min_length=1, max_length=100)
     description: str = Field(..., min_length=1, max_length=1000)
     priority: Optional[str] = None
     status: Optional[str] = None
     urgency: Optional[str] = None
     category: Optional[str] = None
     due_date: Optional[date] = None
     estimated_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     images: List[str] = []

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "property_id": 1,
                    "title": "Leaking kitchen tap",
                    "description": "The kitchen tap drips constantly.",
                    "priority": "Medium",
                    "category": "Plumbing",
               }
          }
     )


class MaintenanceUpdate(BaseModel):
     title: Optional[str] = Field(None, min_length=1, max_length=100)
     description: Optional[str] = Field(None, min_length=1, max_length=1000)
     priority: Optional[str] = None
     status: Optional[str] = None
     urgency: Optional[str] = None
     category: Optional[str] = None
     due_date: Optional[date] = None
     estimated_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     actual_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class NoteCreate(BaseModel):
     content: str = Field(..., min_length=1)
     is_internal: bool = False


class FeedbackRequest(BaseModel):
     rating: int = Field(..., ge=1, le=5)
     feedback: Optional[str] = Field(None, max_length=1000)


class MaintenanceNoteResponse(BaseModel):
     id: int
     author_id: int
     content: str
     is_internal: bool
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class MaintenanceResponse(BaseModel):
     id: int
     property_id: int
     tenant_id: Optional[int] = None
     landlord_id: Optional[int] = None
     title: str
     description: str
     priority: str
     status: str
     category: str
     urgency: str
     date_reported: datetime
     date_started: Optional[datetime] = None
     date_completed: Optional[datetime] = None
     due_date: Optional[date] = None
     images: List[str] = []
     estimated_cost: Optional[Decimal] = None
     actual_cost: Optional[Decimal] = None
     is_emergency: bool
     is_overdue: bool
     days_open: int
     satisfaction_rating: Optional[int] = None
     feedback: Optional[str] = None
     notes: List[MaintenanceNoteResponse] = []
     property_address: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class MaintenanceListResponse(BaseModel):
     requests: List[MaintenanceResponse]
     total: int
     page: int = 1
     page_size: int = 20
