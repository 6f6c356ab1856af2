# services/property_request_service.py
"""
Property Request Service - tenants asking to rent (or have listed) a
property, and landlords answering them.
"""
import logging
from typing import Optional

from sqlalchemy import or_, and_
from sqlalchemy.orm import Session

from errors import ExternalServiceError, InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from models import Property, PropertyRequest, User
from models.property import PROPERTY_TYPES
from models.property_request import PropertyRequestStatus, PropertyRequestType
from services.notification_service import NotificationService
from utils import email
from utils.currency import to_decimal

logger = logging.getLogger(__name__)

DEFAULT_NEXT_STEPS = "I will contact you to arrange a viewing and discuss lease terms."


class PropertyRequestService:
     """Service class for property request business logic."""

     @staticmethod
     def create_request(db: Session, tenant_id: int, data: dict) -> PropertyRequest:
          """
          Create a pending request.

          existing_property requests need property_id and are routed to that
          property's landlord. new_property requests need an address and are
          routed to the landlord named by email (or landlord_id) when known.

          Raises:
               ValidationError: If required fields for the request type are missing
               NotFoundError: If the referenced property doesn't exist
          """
          request_type = data.get("request_type")
          if not request_type:
               raise ValidationError("Request type is required", field="request_type")
          if request_type not in [t.value for t in PropertyRequestType]:
               raise ValidationError(f"Invalid request type: {request_type}", field="request_type")

          request = PropertyRequest(
               tenant_id=tenant_id,
               request_type=request_type,
               status=PropertyRequestStatus.PENDING.value,
               preferred_move_in=data.get("preferred_move_in"),
               lease_duration_months=data.get("lease_duration_months") or 12,
               additional_requests=data.get("additional_requests"),
               is_urgent=bool(data.get("is_urgent")),
               messages=[],
          )

          if request_type in (PropertyRequestType.EXISTING_PROPERTY.value, PropertyRequestType.LEASE_REQUEST.value):
               if not data.get("property_id"):
                    raise ValidationError("Property ID is required for existing property requests", field="property_id")
               prop = db.query(Property).filter(Property.id == data["property_id"]).first()
               if not prop:
                    raise NotFoundError("Property", data["property_id"])
               request.property_id = prop.id
               request.landlord_id = prop.landlord_id
          else:
               if not data.get("address"):
                    raise ValidationError("Property address is required for new property requests", field="address")
               property_type = data.get("property_type")
               if property_type and property_type not in PROPERTY_TYPES:
                    raise ValidationError(f"Invalid property type: {property_type}", field="property_type")
               request.address = data["address"]
               request.estimated_rent = to_decimal(data["estimated_rent"]) if data.get("estimated_rent") is not None else None
               request.bedrooms = data.get("bedrooms")
               request.bathrooms = data.get("bathrooms")
               request.property_type = property_type
               request.description = data.get("description")
               request.landlord_email = (data.get("landlord_email") or "").lower() or None
               request.landlord_phone = data.get("landlord_phone")
               if request.landlord_email:
                    landlord = (
                         db.query(User)
                         .filter(User.email == request.landlord_email, User.role == "landlord")
                         .first()
                    )
                    if landlord:
                         request.landlord_id = landlord.id
               if data.get("landlord_id"):
                    request.landlord_id = data["landlord_id"]

          if data.get("message"):
               request.add_message(tenant_id, data["message"])

          db.add(request)
          db.flush()

          if request.request_type == PropertyRequestType.NEW_PROPERTY.value:
               target = request.landlord_id or request.landlord_email
               if target:
                    NotificationService.property_request(db, target, tenant_id, request.address)
          elif request.landlord_id:
               NotificationService.tenant_registration(db, request.landlord_id, tenant_id, request.id)

          logger.info("Property request %s (%s) created by tenant %s", request.id, request_type, tenant_id)
          return request

     @staticmethod
     def visible_to_landlord(landlord: User):
          """SQL filter for requests a landlord may see: theirs, sent to their email, or unassigned."""
          return or_(
               PropertyRequest.landlord_id == landlord.id,
               and_(
                    PropertyRequest.request_type == PropertyRequestType.NEW_PROPERTY.value,
                    PropertyRequest.landlord_email == landlord.email,
               ),
               and_(
                    PropertyRequest.request_type == PropertyRequestType.NEW_PROPERTY.value,
                    PropertyRequest.landlord_id.is_(None),
               ),
          )

     @staticmethod
     def _get_owned_request(db: Session, request_id: int, landlord_id: int) -> PropertyRequest:
          request = db.query(PropertyRequest).filter(PropertyRequest.id == request_id).first()
          if not request:
               raise NotFoundError("Property request", request_id)
          if request.landlord_id != landlord_id:
               landlord = db.query(User).filter(User.id == landlord_id).first()
               claimable = (
                    request.landlord_id is None
                    and landlord is not None
                    and landlord.role == "landlord"
                    and request.landlord_email
                    and request.landlord_email == landlord.email
               )
               if not claimable:
                    raise PermissionDeniedError("Access denied")
               request.landlord_id = landlord_id
          if request.status != PropertyRequestStatus.PENDING.value:
               raise InvalidStateError("Request has already been responded to")
          return request

     @staticmethod
     def approve_request(
          db: Session,
          request_id: int,
          landlord_id: int,
          response_message: str,
          next_steps: Optional[str] = None,
          property_details: Optional[dict] = None,
     ) -> PropertyRequest:
          """
          Approve a pending request, optionally creating the requested property.

          Raises:
               ValidationError: If the response message is empty (checked first)
               NotFoundError: If the request doesn't exist
               PermissionDeniedError: If the request belongs to another landlord
               InvalidStateError: If the request was already answered
          """
          if not response_message or not response_message.strip():
               raise ValidationError("Response message is required", field="responseMessage")
          request = PropertyRequestService._get_owned_request(db, request_id, landlord_id)

          request.approve(landlord_id, response_message.strip(), next_steps or DEFAULT_NEXT_STEPS)

          if property_details is not None and request.property_id is None:
               prop = Property(
                    address=property_details.get("address") or request.address,
                    property_type=property_details.get("property_type") or request.property_type or "House",
                    monthly_rent=to_decimal(property_details.get("monthly_rent") or request.estimated_rent),
                    bedrooms=property_details.get("bedrooms", request.bedrooms),
                    bathrooms=property_details.get("bathrooms", request.bathrooms),
                    description=property_details.get("description") or request.description,
                    landlord_id=landlord_id,
                    is_available=True,
                    images=[],
               )
               db.add(prop)
               db.flush()
               request.property_id = prop.id
               request.status = PropertyRequestStatus.PROPERTY_CREATED.value
               logger.info("Property %s created from request %s", prop.id, request.id)

          landlord = db.query(User).filter(User.id == landlord_id).first()
          NotificationService.create_notification(
               db,
               recipient_id=request.tenant_id,
               sender_id=landlord_id,
               type="property_request_approved",
               title="Property Request Approved!",
               message=f"Your property request has been approved by {landlord.name}. {response_message.strip()}",
               related_property_request_id=request.id,
               related_property_id=request.property_id,
               related_document_id=request.id,
               related_document_model="PropertyRequest",
               action_url=f"/dashboard/property-requests/{request.id}",
          )
          if email.is_email_configured():
               address = request.premises.address if request.premises else request.address
               try:
                    email.send_request_approved_email(request, landlord.name, address or "")
               except ExternalServiceError as exc:
                    logger.warning("Failed to send approval email for request %s: %s", request.id, exc.message)

          db.flush()
          logger.info("Property request %s approved by landlord %s", request.id, landlord_id)
          return request

     @staticmethod
     def reject_request(db: Session, request_id: int, landlord_id: int, reason: Optional[str]) -> PropertyRequest:
          """
          Reject a pending request and tell the tenant why.

          Raises:
               ValidationError: If the reason is empty (checked before the lookup)
               NotFoundError: If the request doesn't exist
               PermissionDeniedError: If the request belongs to another landlord
               InvalidStateError: If the request was already answered
          """
          if not reason or not reason.strip():
               raise ValidationError("Rejection reason is required", field="rejectionReason")
          request = PropertyRequestService._get_owned_request(db, request_id, landlord_id)

          request.reject(landlord_id, reason.strip())
          NotificationService.request_rejected(db, request.tenant_id, landlord_id, request.id, reason.strip())
          db.flush()
          logger.info("Property request %s rejected by landlord %s", request.id, landlord_id)
          return request

     @staticmethod
     def lease_creation_url(request: PropertyRequest) -> str:
          url = f"/dashboard/leases/create?tenant={request.tenant_id}&requestId={request.id}"
          if request.property_id:
               url += f"&property={request.property_id}"
          return url

     @staticmethod
     def status_counts(db: Session, landlord: User) -> dict:
          counts = {status.value: 0 for status in PropertyRequestStatus}
          rows = (
               db.query(PropertyRequest.status)
               .filter(PropertyRequestService.visible_to_landlord(landlord))
               .all()
          )
          for (status,) in rows:
               counts[status] = counts.get(status, 0) + 1
          return counts
