# schemas/property.py
"""
Pydantic schemas for Property API request/response validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class PropertyTypeEnum(str, Enum):
     APARTMENT = "Apartment"
     HOUSE = "House"
     CONDO = "Condo"
     TOWNHOUSE = "Townhouse"
     COMMERCIAL = "Commercial"


class PropertyCreate(BaseModel):
     """Schema for listing a new property."""
     address: str = Field(..., min_length=1, max_length=255)
     property_type: PropertyTypeEnum
     monthly_rent: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     bedrooms: Optional[int] = Field(None, ge=0)
     bathrooms: Optional[int] = Field(None, ge=0)
     description: Optional[str] = Field(None, max_length=1000)
     is_available: bool = True
     images: List[str] = []

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "address": "12 Kabulonga Road, Lusaka",
                    "property_type": "House",
                    "monthly_rent": 5000.00,
                    "bedrooms": 3,
                    "bathrooms": 2,
                    "description": "Family house with garden",
               }
          }
     )


class PropertyUpdate(BaseModel):
     address: Optional[str] = Field(None, min_length=1, max_length=255)
     property_type: Optional[PropertyTypeEnum] = None
     monthly_rent: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     bedrooms: Optional[int] = Field(None, ge=0)
     bathrooms: Optional[int] = Field(None, ge=0)
     description: Optional[str] = Field(None, max_length=1000)
     is_available: Optional[bool] = None
     images: Optional[List[str]] = None


class PropertyResponse(BaseModel):
     id: int
     address: str
     property_type: str
     monthly_rent: Decimal
     bedrooms: Optional[int] = None
     bathrooms: Optional[int] = None
     landlord_id: int
     is_available: bool
     description: Optional[str] = None
     images: List[str] = []
     created_at: datetime
     landlord_name: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
     properties: List[PropertyResponse]
     total: int
     page: int = 1
     page_size: int = 50
