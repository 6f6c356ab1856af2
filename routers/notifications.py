# routers/notifications.py
"""
Notification API routes. Every user only ever sees their own notifications.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import require_roles, verify_token
from schemas.notification import (
     NotificationCreate,
     NotificationListResponse,
     NotificationPatch,
     NotificationResponse,
)
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
     unread_only: bool = Query(False, alias="unreadOnly"),
     type: Optional[str] = Query(None),
     limit: int = Query(50, ge=1, le=100),
     skip: int = Query(0, ge=0),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     notifications, total = NotificationService.list_notifications(
          db, token["id"], unread_only=unread_only, type=type, limit=limit, skip=skip
     )
     return NotificationListResponse(
          notifications=[NotificationResponse.model_validate(n) for n in notifications],
          total=total,
          unread_count=NotificationService.unread_count(db, token["id"]),
     )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_notification(
     body: NotificationCreate,
     db: Session = Depends(get_session),
     token: dict = Depends(require_roles("landlord", "manager", "admin")),
):
     notification = NotificationService.create_notification(
          db,
          recipient_id=body.recipient_id,
          sender_id=token["id"],
          type=body.type,
          title=body.title or "New Notification",
          message=body.message,
          related_document_id=body.related_document_id,
          related_document_model=body.related_document_model,
          action_required=body.action_required,
          action_url=body.action_url,
          priority=body.priority,
     )
     db.commit()
     db.refresh(notification)
     return {
          "message": "Notification created successfully",
          "notification": NotificationResponse.model_validate(notification),
     }


@router.patch("")
def update_notifications(
     body: NotificationPatch,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """Mark one notification (`notificationId`) or all of them (`markAllAsRead`) as read."""
     if body.mark_all_as_read:
          count = NotificationService.mark_all_as_read(db, token["id"])
          db.commit()
          return {"success": True, "message": f"Marked {count} notifications as read"}

     if body.notification_id:
          notification = NotificationService.mark_as_read(db, body.notification_id, token["id"])
          if not notification:
               raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
          db.commit()
          db.refresh(notification)
          return {
               "success": True,
               "message": "Notification marked as read",
               "notification": NotificationResponse.model_validate(notification),
          }

     raise HTTPException(
          status_code=status.HTTP_400_BAD_REQUEST,
          detail="notificationId or markAllAsRead required"
     )


@router.post("/mark-all-read")
def mark_all_read(
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     count = NotificationService.mark_all_as_read(db, token["id"])
     db.commit()
     return {"message": "All notifications marked as read", "modifiedCount": count}


@router.patch("/{notification_id}", response_model=NotificationResponse)
def mark_notification_read(
     notification_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     notification = NotificationService.mark_as_read(db, notification_id, token["id"])
     if not notification:
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
     db.commit()
     db.refresh(notification)
     return notification


@router.delete("/{notification_id}")
def delete_notification(
     notification_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     if not NotificationService.delete_notification(db, notification_id, token["id"]):
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
     db.commit()
     return {"message": "Notification deleted successfully"}
