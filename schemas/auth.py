# schemas/auth.py
"""
Pydantic schemas for registration, login and the current user.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class RegisterRequest(BaseModel):
     name: str = Field(..., min_length=1, max_length=200)
     email: str = Field(..., min_length=3, max_length=255)
     password: str = Field(..., min_length=6)
     phone: Optional[str] = Field(None, max_length=50)
     role: str = Field(default="tenant", pattern="^(landlord|tenant)$")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "name": "Jane Banda",
                    "email": "jane@example.com",
                    "password": "secret123",
                    "role": "tenant",
               }
          }
     )


class LoginRequest(BaseModel):
     email: str = Field(..., min_length=3, max_length=255)
     password: str


class UserResponse(BaseModel):
     id: int
     name: str
     email: str
     phone: Optional[str] = None
     role: str
     is_active: bool
     current_property_id: Optional[int] = None
     current_lease_id: Optional[int] = None
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
     token: str
     user: UserResponse
