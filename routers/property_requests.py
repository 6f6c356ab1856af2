# routers/property_requests.py
"""
Property request API routes.

Tenants file requests to rent an existing property or to have a new one
listed; landlords approve or reject them.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import verify_token
from models import PropertyRequest, User
from schemas.property_request import (
     ApproveRequest,
     PropertyRequestCreate,
     PropertyRequestListResponse,
     PropertyRequestResponse,
     RejectRequest,
)
from services.property_request_service import PropertyRequestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/property-requests", tags=["property-requests"])


def _current_user(db: Session, token: dict) -> User:
     user = db.query(User).filter(User.id == token.get("id")).first()
     if not user:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
     return user


@router.post("", response_model=PropertyRequestResponse, status_code=status.HTTP_201_CREATED)
def create_property_request(
     body: PropertyRequestCreate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     if token.get("role") != "tenant":
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="Only tenants can submit property requests"
          )
     data = body.model_dump(exclude_none=True)
     data["request_type"] = body.request_type.value
     request = PropertyRequestService.create_request(db, token["id"], data)
     db.commit()
     db.refresh(request)
     return request


@router.get("", response_model=PropertyRequestListResponse)
def list_property_requests(
     status_filter: Optional[str] = Query(None, alias="status"),
     request_type: Optional[str] = Query(None),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """
     **Role-based access:**
     - **Tenant**: own requests.
     - **Landlord**: requests for own properties, addressed to own email, or unassigned.
     - **Admin / Manager**: all requests.
     """
     query = db.query(PropertyRequest)
     role = token.get("role")
     counts = None
     if role == "tenant":
          query = query.filter(PropertyRequest.tenant_id == token.get("id"))
     elif role == "landlord":
          landlord = _current_user(db, token)
          query = query.filter(PropertyRequestService.visible_to_landlord(landlord))
          counts = PropertyRequestService.status_counts(db, landlord)

     if status_filter:
          query = query.filter(PropertyRequest.status == status_filter)
     if request_type:
          query = query.filter(PropertyRequest.request_type == request_type)

     requests = query.order_by(PropertyRequest.created_at.desc(), PropertyRequest.id.desc()).all()
     return PropertyRequestListResponse(
          requests=[PropertyRequestResponse.model_validate(r) for r in requests],
          total=len(requests),
          status_counts=counts,
     )


@router.get("/{request_id}", response_model=PropertyRequestResponse)
def get_property_request(
     request_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     request = db.query(PropertyRequest).filter(PropertyRequest.id == request_id).first()
     if not request:
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property request not found")

     role = token.get("role")
     if role == "tenant" and request.tenant_id != token.get("id"):
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
     if role == "landlord":
          landlord = _current_user(db, token)
          visible = (
               db.query(PropertyRequest.id)
               .filter(PropertyRequest.id == request_id, PropertyRequestService.visible_to_landlord(landlord))
               .first()
          )
          if not visible:
               raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
     return request


@router.post("/{request_id}/approve")
def approve_property_request(
     request_id: int,
     body: ApproveRequest = Body(...),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     if token.get("role") != "landlord":
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="Only landlords can approve property requests"
          )
     property_details = None
     if body.create_property or body.property_details is not None:
          property_details = body.property_details.model_dump(exclude_none=True) if body.property_details else {}

     request = PropertyRequestService.approve_request(
          db,
          request_id,
          token["id"],
          body.response_message,
          next_steps=body.next_steps,
          property_details=property_details,
     )
     db.commit()
     db.refresh(request)

     return {
          "success": True,
          "message": "Property request approved successfully",
          "data": {
               "request": PropertyRequestResponse.model_validate(request),
               "leaseCreationUrl": PropertyRequestService.lease_creation_url(request),
          },
     }


@router.post("/{request_id}/reject")
def reject_property_request(
     request_id: int,
     body: Optional[RejectRequest] = Body(None),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     if token.get("role") != "landlord":
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="Only landlords can reject property requests"
          )
     request = PropertyRequestService.reject_request(db, request_id, token["id"], body.rejection_reason if body else None)
     db.commit()
     db.refresh(request)

     return {
          "success": True,
          "message": "Property request rejected",
          "data": {
               "requestId": request.id,
               "status": request.status,
               "rejectionReason": request.response_message,
               "respondedAt": request.responded_at,
          },
     }
