# schemas/notification.py
"""
Pydantic schemas for in-app notifications.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


class NotificationCreate(BaseModel):
     recipient_id: int = Field(..., gt=0, alias="recipient")
     type: str = "general"
     title: Optional[str] = Field(None, max_length=200)
     message: str = Field(..., min_length=1)
     related_document_id: Optional[int] = Field(None, alias="relatedDocument")
     related_document_model: Optional[str] = Field(None, alias="relatedDocumentModel")
     action_required: bool = Field(default=False, alias="actionRequired")
     action_url: Optional[str] = Field(None, alias="actionUrl")
     priority: str = "medium"

     model_config = ConfigDict(populate_by_name=True)


class NotificationPatch(BaseModel):
     """PATCH /api/notifications: mark one notification or all of them as read."""
     notification_id: Optional[int] = Field(None, alias="notificationId")
     mark_all_as_read: bool = Field(default=False, alias="markAllAsRead")

     model_config = ConfigDict(populate_by_name=True)


class NotificationResponse(BaseModel):
     id: int
     recipient_id: int
     sender_id: Optional[int] = None
     type: str
     title: str
     message: str
     related_document_id: Optional[int] = None
     related_document_model: Optional[str] = None
     related_property_id: Optional[int] = None
     related_property_request_id: Optional[int] = None
     related_lease_id: Optional[int] = None
     action_required: bool
     action_url: Optional[str] = None
     is_read: bool
     read_at: Optional[datetime] = None
     priority: str
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
     notifications: List[NotificationResponse]
     total: int
     unread_count: int
