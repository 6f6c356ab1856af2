# services/notification_service.py
"""
Notification Service - creating, listing and reading user notifications.

Every workflow that needs to tell someone about something (a new invoice,
a rejected request, a signed lease) goes through create_notification so
the type/priority checks live in one place.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from errors import ValidationError
from models import Notification, User
from models.base import utcnow
from models.notification import NOTIFICATION_TYPES, PRIORITIES, RELATED_MODELS

logger = logging.getLogger(__name__)


class NotificationService:
     """Service class for notification-related business logic."""

     @staticmethod
     def create_notification(
          db: Session,
          recipient_id: int,
          type: str,
          message: str,
          sender_id: Optional[int] = None,
          title: Optional[str] = None,
          related_document_id: Optional[int] = None,
          related_document_model: Optional[str] = None,
          related_property_id: Optional[int] = None,
          related_property_request_id: Optional[int] = None,
          related_lease_id: Optional[int] = None,
          action_required: bool = False,
          action_url: Optional[str] = None,
          priority: str = "medium",
     ) -> Notification:
          """
          Create a notification and flush it so it has an ID.

          Raises:
               ValidationError: If type, priority or related model is not recognised,
                    or the message is empty
          """
          if type not in NOTIFICATION_TYPES:
               raise ValidationError(f"Invalid notification type: {type}", field="type")
          if priority not in PRIORITIES:
               raise ValidationError(f"Invalid priority: {priority}", field="priority")
          if related_document_model is not None and related_document_model not in RELATED_MODELS:
               raise ValidationError(f"Invalid related document model: {related_document_model}",
                                     field="relatedDocumentModel")
          if not message or not message.strip():
               raise ValidationError("Message is required", field="message")

          notification = Notification(
               recipient_id=recipient_id,
               sender_id=sender_id,
               type=type,
               title=title or "Notification",
               message=message.strip(),
               related_document_id=related_document_id,
               related_document_model=related_document_model,
               related_property_id=related_property_id,
               related_property_request_id=related_property_request_id,
               related_lease_id=related_lease_id,
               action_required=action_required,
               action_url=action_url,
               priority=priority,
          )
          db.add(notification)
          db.flush()
          logger.info("Notification %s (%s) created for user %s", notification.id, type, recipient_id)
          return notification

     # ------------------------------------------------------------------
     # Templates
     # ------------------------------------------------------------------

     @staticmethod
     def tenant_registration(db: Session, landlord_id: int, tenant_id: int, property_request_id: int) -> Notification:
          return NotificationService.create_notification(
               db,
               recipient_id=landlord_id,
               sender_id=tenant_id,
               type="tenant_registration",
               title="New Tenant Registration Request",
               message="A new tenant has registered and is requesting to rent one of your properties.",
               related_property_request_id=property_request_id,
               related_document_id=property_request_id,
               related_document_model="PropertyRequest",
               action_required=True,
               action_url=f"/landlord/tenant-requests/{property_request_id}",
               priority="high",
          )

     @staticmethod
     def property_request(db: Session, landlord: int | str, tenant_id: int, address: str) -> Optional[Notification]:
          """
          Tell a landlord that a tenant wants a property listed.

          landlord may be a user ID or an email address. Returns None when the
          email does not belong to a registered user.
          """
          recipient_id = landlord
          if isinstance(landlord, str) and "@" in landlord:
               user = db.query(User).filter(User.email == landlord.lower()).first()
               if not user:
                    logger.warning("Landlord with email %s not found in system", landlord)
                    return None
               recipient_id = user.id
          return NotificationService.create_notification(
               db,
               recipient_id=recipient_id,
               sender_id=tenant_id,
               type="property_request",
               title="New Property Upload Request",
               message=f"A tenant is looking for a property at {address} and has requested you to list it.",
               action_required=True,
               action_url="/landlord/property-requests",
          )

     @staticmethod
     def property_approved(db: Session, tenant_id: int, landlord_id: int, property_request_id: int,
                           property_id: Optional[int]) -> Notification:
          if property_id:
               message = "Your property request has been approved and the property has been created."
               action_url = f"/tenant/properties/{property_id}"
          else:
               message = "Your property request has been approved."
               action_url = f"/tenant/property-requests/{property_request_id}"
          return NotificationService.create_notification(
               db,
               recipient_id=tenant_id,
               sender_id=landlord_id,
               type="property_approved",
               title="Property Request Approved",
               message=message,
               related_property_request_id=property_request_id,
               related_property_id=property_id,
               related_document_id=property_request_id,
               related_document_model="PropertyRequest",
               action_required=True,
               action_url=action_url,
               priority="high",
          )

     @staticmethod
     def request_rejected(db: Session, tenant_id: int, landlord_id: int, property_request_id: int,
                          reason: str) -> Notification:
          return NotificationService.create_notification(
               db,
               recipient_id=tenant_id,
               sender_id=landlord_id,
               type="request_rejected",
               title="Property Request Rejected",
               message=f"Your property request has been rejected. Reason: {reason}",
               related_property_request_id=property_request_id,
               related_document_id=property_request_id,
               related_document_model="PropertyRequest",
          )

     @staticmethod
     def lease_created(db: Session, tenant_id: int, landlord_id: int, lease_id: int,
                       property_request_id: Optional[int] = None) -> Notification:
          return NotificationService.create_notification(
               db,
               recipient_id=tenant_id,
               sender_id=landlord_id,
               type="lease_approved",
               title="Lease Created",
               message="Your tenant registration has been approved and a lease has been created.",
               related_lease_id=lease_id,
               related_property_request_id=property_request_id,
               related_document_id=lease_id,
               related_document_model="Lease",
               action_required=True,
               action_url=f"/tenant/leases/{lease_id}",
               priority="high",
          )

     # ------------------------------------------------------------------
     # Reading
     # ------------------------------------------------------------------

     @staticmethod
     def list_notifications(
          db: Session,
          user_id: int,
          unread_only: bool = False,
          type: Optional[str] = None,
          limit: int = 20,
          skip: int = 0,
     ) -> tuple[list[Notification], int]:
          """Return (page of notifications newest first, total matching)."""
          query = db.query(Notification).filter(Notification.recipient_id == user_id)
          if unread_only:
               query = query.filter(Notification.is_read.is_(False))
          if type:
               query = query.filter(Notification.type == type)
          total = query.count()
          notifications = (
               query.order_by(Notification.created_at.desc(), Notification.id.desc())
               .offset(skip)
               .limit(limit)
               .all()
          )
          return notifications, total

     @staticmethod
     def unread_count(db: Session, user_id: int) -> int:
          return (
               db.query(Notification)
               .filter(Notification.recipient_id == user_id, Notification.is_read.is_(False))
               .count()
          )

     @staticmethod
     def get_for_user(db: Session, notification_id: int, user_id: int) -> Optional[Notification]:
          return (
               db.query(Notification)
               .filter(Notification.id == notification_id, Notification.recipient_id == user_id)
               .first()
          )

     @staticmethod
     def mark_as_read(db: Session, notification_id: int, user_id: int) -> Optional[Notification]:
          """Mark one of the user's notifications read. None when it is not theirs."""
          notification = NotificationService.get_for_user(db, notification_id, user_id)
          if notification is None:
               return None
          notification.mark_as_read()
          db.flush()
          return notification

     @staticmethod
     def mark_all_as_read(db: Session, user_id: int) -> int:
          """Mark every unread notification of the user read; returns how many changed."""
          updated = (
               db.query(Notification)
               .filter(Notification.recipient_id == user_id, Notification.is_read.is_(False))
               .update({Notification.is_read: True, Notification.read_at: utcnow()}, synchronize_session="fetch")
          )
          logger.info("Marked %s notifications read for user %s", updated, user_id)
          return updated

     @staticmethod
     def delete_notification(db: Session, notification_id: int, user_id: int) -> bool:
          notification = NotificationService.get_for_user(db, notification_id, user_id)
          if notification is None:
               return False
          db.delete(notification)
          db.flush()
          return True
