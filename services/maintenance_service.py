# services/maintenance_service.py
"""
Maintenance Service - repair requests against properties, their notes,
status changes and tenant feedback.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from errors import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from models import MaintenanceNote, MaintenanceRequest, Property
from models.base import utcnow
from models.maintenance import CATEGORIES, CLOSED_STATUSES, PRIORITIES, STATUSES, URGENCIES
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

NOTE_MAX_LENGTH = 500
EDITABLE_FIELDS = (
     "title", "description", "priority", "category", "urgency",
     "due_date", "estimated_cost", "actual_cost",
)


def _validate_choice(value, allowed, field):
     if value is not None and value not in allowed:
          raise ValidationError(f"Invalid {field}: {value}. Must be one of {', '.join(allowed)}", field=field)


class MaintenanceService:
     """Service class for maintenance request business logic."""

     @staticmethod
     def check_property_access(prop: Property, actor: dict, tenant_id: Optional[int] = None) -> None:
          role = actor.get("role")
          if role in ("admin", "manager"):
               return
          if role == "landlord" and prop.landlord_id == actor.get("id"):
               return
          if role == "tenant" and tenant_id == actor.get("id"):
               return
          raise PermissionDeniedError("You do not have access to this property")

     @staticmethod
     def check_access(request: MaintenanceRequest, actor: dict) -> None:
          role = actor.get("role")
          if role in ("admin", "manager"):
               return
          if role == "landlord" and request.landlord_id == actor.get("id"):
               return
          if role == "tenant" and request.tenant_id == actor.get("id"):
               return
          raise PermissionDeniedError("You do not have access to this maintenance request")

     @staticmethod
     def create_request(db: Session, data: dict, actor: dict) -> MaintenanceRequest:
          """
          File a maintenance request and notify the property's landlord.

          Tenants always file for themselves; staff and landlords may name a tenant.

          Raises:
               ValidationError: If title/description are missing or a choice field is invalid
               NotFoundError: If the property doesn't exist
               PermissionDeniedError: If the actor has no access to the property
          """
          title = (data.get("title") or "").strip()
          description = (data.get("description") or "").strip()
          if not title or not description:
               raise ValidationError("Title and description are required")
          if len(title) > 100:
               raise ValidationError("Title cannot exceed 100 characters", field="title")
          if len(description) > 1000:
               raise ValidationError("Description cannot exceed 1000 characters", field="description")
          priority = data.get("priority") or "Medium"
          status = data.get("status") or "Pending"
          urgency = data.get("urgency") or "Normal"
          category = data.get("category") or "Other"
          _validate_choice(priority, PRIORITIES, "priority")
          _validate_choice(status, STATUSES, "status")
          _validate_choice(urgency, URGENCIES, "urgency")
          _validate_choice(category, CATEGORIES, "category")

          prop = db.query(Property).filter(Property.id == data.get("property_id")).first()
          if not prop:
               raise NotFoundError("Property", data.get("property_id"))
          tenant_id = actor["id"] if actor.get("role") == "tenant" else data.get("tenant_id")
          MaintenanceService.check_property_access(prop, actor, tenant_id)

          now = utcnow()
          request = MaintenanceRequest(
               property_id=prop.id,
               tenant_id=tenant_id,
               landlord_id=prop.landlord_id,
               title=title,
               description=description,
               priority=priority,
               status=status,
               urgency=urgency,
               category=category,
               due_date=data.get("due_date"),
               estimated_cost=data.get("estimated_cost"),
               images=list(data.get("images") or []),
               date_reported=now,
               created_by=actor["id"],
               updated_by=actor["id"],
          )
          MaintenanceService._sync_status_dates(request, now)
          request.refresh_emergency_flag()
          db.add(request)
          db.flush()

          if prop.landlord_id != actor["id"]:
               NotificationService.create_notification(
                    db,
                    recipient_id=prop.landlord_id,
                    sender_id=actor["id"],
                    type="maintenance_request",
                    title="Emergency Maintenance Request" if request.is_emergency else "New Maintenance Request",
                    message=f"New maintenance request for {prop.address}: {title}",
                    related_property_id=prop.id,
                    related_document_id=request.id,
                    related_document_model="Maintenance",
                    action_required=True,
                    action_url=f"/maintenance/{request.id}",
                    priority="urgent" if request.is_emergency else "medium",
               )
          logger.info("Maintenance request %s created for property %s", request.id, prop.id)
          return request

     @staticmethod
     def _sync_status_dates(request: MaintenanceRequest, now) -> None:
          if request.status == "In Progress" and not request.date_started:
               request.date_started = now
          if request.status == "Completed":
               if not request.date_completed:
                    request.date_completed = now
          else:
               request.date_completed = None

     @staticmethod
     def update_request(db: Session, request: MaintenanceRequest, changes: dict, actor: dict) -> MaintenanceRequest:
          """Apply field edits and an optional status change."""
          MaintenanceService.check_access(request, actor)
          if actor.get("role") == "tenant" and request.status != "Pending":
               raise PermissionDeniedError("Tenants can only edit pending requests")
          _validate_choice(changes.get("priority"), PRIORITIES, "priority")
          _validate_choice(changes.get("urgency"), URGENCIES, "urgency")
          _validate_choice(changes.get("category"), CATEGORIES, "category")

          for field in EDITABLE_FIELDS:
               if changes.get(field) is not None:
                    setattr(request, field, changes[field])
          request.updated_by = actor["id"]
          request.refresh_emergency_flag()

          new_status = changes.get("status")
          if new_status is not None and new_status != request.status:
               if actor.get("role") == "tenant" and new_status != "Cancelled":
                    raise PermissionDeniedError("Tenants can only cancel their requests")
               MaintenanceService.update_status(db, request, new_status, actor)
          db.flush()
          return request

     @staticmethod
     def update_status(db: Session, request: MaintenanceRequest, new_status: str, actor: dict) -> MaintenanceRequest:
          _validate_choice(new_status, STATUSES, "status")
          old_status = request.status
          request.status = new_status
          request.updated_by = actor["id"]
          MaintenanceService._sync_status_dates(request, utcnow())
          request.notes.append(MaintenanceNote(
               author_id=actor["id"],
               content=f"Status changed from {old_status} to {new_status}",
               is_internal=True,
          ))
          if request.tenant_id and request.tenant_id != actor["id"]:
               NotificationService.create_notification(
                    db,
                    recipient_id=request.tenant_id,
                    sender_id=actor["id"],
                    type="maintenance_request",
                    title="Maintenance Update",
                    message=f"Your maintenance request '{request.title}' is now {new_status}.",
                    related_document_id=request.id,
                    related_document_model="Maintenance",
               )
          logger.info("Maintenance request %s: %s -> %s", request.id, old_status, new_status)
          return request

     @staticmethod
     def add_note(db: Session, request: MaintenanceRequest, actor: dict, content: str,
                  is_internal: bool = False) -> MaintenanceNote:
          MaintenanceService.check_access(request, actor)
          content = (content or "").strip()
          if not content:
               raise ValidationError("Note content is required", field="content")
          if len(content) > NOTE_MAX_LENGTH:
               raise ValidationError(f"Note cannot exceed {NOTE_MAX_LENGTH} characters", field="content")
          # Tenants never write or see internal notes
          if actor.get("role") == "tenant":
               is_internal = False
          note = MaintenanceNote(author_id=actor["id"], content=content, is_internal=is_internal)
          request.notes.append(note)
          request.updated_by = actor["id"]
          db.flush()
          return note

     @staticmethod
     def visible_notes(request: MaintenanceRequest, actor: dict) -> list[MaintenanceNote]:
          if actor.get("role") == "tenant":
               return [note for note in request.notes if not note.is_internal]
          return list(request.notes)

     @staticmethod
     def set_tenant_feedback(db: Session, request: MaintenanceRequest, actor: dict, rating: int,
                             feedback: Optional[str] = None) -> MaintenanceRequest:
          if actor.get("id") != request.tenant_id:
               raise PermissionDeniedError("Only the reporting tenant can leave feedback")
          if request.status != "Completed":
               raise InvalidStateError("Feedback can only be left on completed requests")
          if not isinstance(rating, int) or not 1 <= rating <= 5:
               raise ValidationError("Rating must be between 1 and 5", field="rating")
          request.satisfaction_rating = rating
          request.feedback = feedback.strip() if feedback else None
          db.flush()
          return request

     @staticmethod
     def add_image(db: Session, request: MaintenanceRequest, url: str) -> MaintenanceRequest:
          request.images = list(request.images or []) + [url]
          db.flush()
          return request

     @staticmethod
     def _scope(query, actor: dict):
          role = actor.get("role")
          if role == "tenant":
               return query.filter(MaintenanceRequest.tenant_id == actor.get("id"))
          if role == "landlord":
               return query.filter(MaintenanceRequest.landlord_id == actor.get("id"))
          return query

     @staticmethod
     def list_requests(
          db: Session,
          actor: dict,
          status: Optional[str] = None,
          priority: Optional[str] = None,
          property_id: Optional[int] = None,
          search: Optional[str] = None,
          page: int = 1,
          page_size: int = 20,
     ) -> tuple[list[MaintenanceRequest], int]:
          query = MaintenanceService._scope(db.query(MaintenanceRequest), actor)
          if status:
               query = query.filter(MaintenanceRequest.status == status)
          if priority:
               query = query.filter(MaintenanceRequest.priority == priority)
          if property_id:
               query = query.filter(MaintenanceRequest.property_id == property_id)
          if search:
               pattern = f"%{search}%"
               query = query.filter(or_(
                    MaintenanceRequest.title.ilike(pattern),
                    MaintenanceRequest.description.ilike(pattern),
               ))
          total = query.count()
          requests = (
               query.order_by(MaintenanceRequest.date_reported.desc(), MaintenanceRequest.id.desc())
               .offset((page - 1) * page_size)
               .limit(page_size)
               .all()
          )
          return requests, total

     @staticmethod
     def overdue_requests(db: Session, actor: dict, today: Optional[date] = None) -> list[MaintenanceRequest]:
          today = today or date.today()
          query = db.query(MaintenanceRequest).filter(
               MaintenanceRequest.status.notin_(CLOSED_STATUSES),
               MaintenanceRequest.due_date < today,
          )
          return MaintenanceService._scope(query, actor).all()

     @staticmethod
     def emergency_requests(db: Session, actor: dict) -> list[MaintenanceRequest]:
          query = db.query(MaintenanceRequest).filter(
               or_(
                    MaintenanceRequest.priority == "High",
                    MaintenanceRequest.urgency == "Emergency",
                    MaintenanceRequest.is_emergency.is_(True),
               ),
               MaintenanceRequest.status != "Completed",
          )
          return MaintenanceService._scope(query, actor).all()
