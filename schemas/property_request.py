# schemas/property_request.py
"""
Pydantic schemas for tenant property requests and landlord responses.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class PropertyRequestTypeEnum(str, Enum):
     EXISTING_PROPERTY = "existing_property"
     NEW_PROPERTY = "new_property"
     LEASE_REQUEST = "lease_request"


class PropertyRequestCreate(BaseModel):
     request_type: PropertyRequestTypeEnum
     property_id: Optional[int] = Field(None, gt=0)
     address: Optional[str] = Field(None, max_length=255)
     estimated_rent: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     bedrooms: Optional[int] = Field(None, ge=0)
     bathrooms: Optional[int] = Field(None, ge=0)
     property_type: Optional[str] = None
     description: Optional[str] = Field(None, max_length=1000)
     landlord_email: Optional[str] = None
     landlord_phone: Optional[str] = None
     message: Optional[str] = Field(None, max_length=1000)
     preferred_move_in: Optional[date] = None
     lease_duration_months: Optional[int] = Field(None, ge=1, le=120)
     additional_requests: Optional[str] = None
     is_urgent: bool = False

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "request_type": "new_property",
                    "address": "7 Leopards Hill Road, Lusaka",
                    "estimated_rent": 4500,
                    "bedrooms": 2,
                    "property_type": "Apartment",
                    "landlord_email": "landlord@example.com",
                    "message": "I currently rent this flat and would like to pay through RentEase.",
               }
          }
     )


class PropertyDetails(BaseModel):
     """Overrides used when approving creates the property."""
     address: Optional[str] = None
     property_type: Optional[str] = None
     monthly_rent: Optional[Decimal] = Field(None, ge=0)
     bedrooms: Optional[int] = Field(None, ge=0)
     bathrooms: Optional[int] = Field(None, ge=0)
     description: Optional[str] = Field(None, max_length=1000)


class ApproveRequest(BaseModel):
     response_message: Optional[str] = Field(None, alias="responseMessage")
     next_steps: Optional[str] = Field(None, alias="nextSteps")
     create_property: bool = Field(default=False, alias="createProperty")
     property_details: Optional[PropertyDetails] = Field(None, alias="propertyDetails")

     model_config = ConfigDict(populate_by_name=True)


class RejectRequest(BaseModel):
     rejection_reason: Optional[str] = Field(None, alias="rejectionReason")

     model_config = ConfigDict(populate_by_name=True)


class PropertyRequestResponse(BaseModel):
     id: int
     tenant_id: int
     request_type: str
     property_id: Optional[int] = None
     landlord_id: Optional[int] = None
     address: Optional[str] = None
     estimated_rent: Optional[Decimal] = None
     bedrooms: Optional[int] = None
     bathrooms: Optional[int] = None
     property_type: Optional[str] = None
     description: Optional[str] = None
     landlord_email: Optional[str] = None
     status: str
     messages: List[Dict[str, Any]] = []
     response_message: Optional[str] = None
     responded_at: Optional[datetime] = None
     next_steps: Optional[str] = None
     preferred_move_in: Optional[date] = None
     lease_duration_months: int
     is_urgent: bool
     expires_at: datetime
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class PropertyRequestListResponse(BaseModel):
     requests: List[PropertyRequestResponse]
     total: int
     status_counts: Optional[Dict[str, int]] = None
