# routers/leases.py
"""
Lease API routes.

     draft -> pending_signature -> signed -> active

Landlords draft and send leases, tenants sign them and the first payment
(deposit + first month) activates them. Landlords can also activate or
deactivate a lease by hand.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, Response, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

import config
from azure_blob import delete_from_blob, upload_to_blob
from database import get_session
from dependencies import require_roles, verify_token
from errors import ExternalServiceError
from models import Lease
from models.base import utcnow
from schemas.lease import (
     LeaseActivationRequest,
     LeaseCreate,
     LeaseListResponse,
     LeasePaymentRequest,
     LeaseResponse,
     LeaseSignRequest,
)
from services.lease_service import LeaseService
from services.pdf_service import generate_lease_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leases", tags=["leases"])

ALLOWED_DOCUMENT_TYPES = ("application/pdf", "application/msword",
                          "application/vnd.openxmlformats-officedocument.wordprocessingml.document")


def _get_lease_or_404(db: Session, lease_id: int) -> Lease:
     lease = db.query(Lease).filter(Lease.id == lease_id).first()
     if not lease:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail="Lease not found"
          )
     return lease


def _require_landlord_access(lease: Lease, token: dict) -> None:
     role = token.get("role")
     if role in ("admin", "manager"):
          return
     if role == "landlord" and lease.landlord_id == token.get("id"):
          return
     raise HTTPException(
          status_code=status.HTTP_403_FORBIDDEN,
          detail="Only the landlord can manage this lease"
     )


def _build_lease_response(lease: Lease) -> LeaseResponse:
     response = LeaseResponse.model_validate(lease)
     if lease.tenant is not None:
          response.tenant_name = lease.tenant.name
     if lease.premises is not None:
          response.property_address = lease.premises.address
     response.next_action = LeaseService.get_next_action(lease)
     return response


@router.post("", response_model=LeaseResponse, status_code=status.HTTP_201_CREATED)
def create_lease(
     body: LeaseCreate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """
     Draft a lease for one of the landlord's properties. When
     property_request_id is given the request moves to lease_requested and
     the tenant is notified.
     """
     if token.get("role") != "landlord":
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="Only landlords can create leases"
          )
     data = body.model_dump()
     if body.property_request_id:
          lease = LeaseService.create_from_property_request(db, body.property_request_id, token["id"], data)
     else:
          lease = LeaseService.create_lease(db, data, token["id"])
     db.commit()
     db.refresh(lease)
     return _build_lease_response(lease)


@router.get("", response_model=LeaseListResponse)
def list_leases(
     status_filter: Optional[str] = Query(None, alias="status"),
     property_id: Optional[int] = Query(None),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=100),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     query = db.query(Lease)
     role = token.get("role")
     if role == "tenant":
          query = query.filter(Lease.tenant_id == token.get("id"))
     elif role == "landlord":
          query = query.filter(Lease.landlord_id == token.get("id"))
     if status_filter:
          query = query.filter(Lease.status == status_filter)
     if property_id:
          query = query.filter(Lease.property_id == property_id)

     total = query.count()
     leases = (
          query.order_by(Lease.created_at.desc(), Lease.id.desc())
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     return LeaseListResponse(
          leases=[_build_lease_response(lease) for lease in leases],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get("/current", response_model=LeaseResponse)
def get_current_lease(
     db: Session = Depends(get_session),
     token: dict = Depends(require_roles("tenant")),
):
     """The tenant's most recent lease that is not terminated or expired."""
     lease = LeaseService.get_tenant_current_lease(db, token["id"])
     if not lease:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail="No current lease"
          )
     return _build_lease_response(lease)


@router.get("/{lease_id}", response_model=LeaseResponse)
def get_lease(
     lease_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     lease = _get_lease_or_404(db, lease_id)
     LeaseService.check_access(lease, token)
     return _build_lease_response(lease)


@router.post("/{lease_id}/send", response_model=LeaseResponse)
def send_lease(
     lease_id: int,
     request: Request,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     lease = _get_lease_or_404(db, lease_id)
     _require_landlord_access(lease, token)
     ip_address = request.client.host if request.client else ""
     LeaseService.send_to_tenant(db, lease, token, ip_address)
     db.commit()
     db.refresh(lease)
     return _build_lease_response(lease)


@router.post("/{lease_id}/sign", response_model=LeaseResponse)
def sign_lease(
     lease_id: int,
     body: LeaseSignRequest,
     request: Request,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     lease = _get_lease_or_404(db, lease_id)
     ip_address = request.client.host if request.client else ""
     LeaseService.sign_by_tenant(db, lease, token, body.signature_data, ip_address, body.full_name or "")
     db.commit()
     db.refresh(lease)
     return _build_lease_response(lease)


@router.post("/{lease_id}/payment", response_model=LeaseResponse)
def record_first_payment(
     lease_id: int,
     body: LeasePaymentRequest,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """Record the deposit + first month payment; the lease becomes active."""
     lease = _get_lease_or_404(db, lease_id)
     LeaseService.check_access(lease, token)
     LeaseService.record_first_payment(
          db,
          lease,
          body.amount,
          paid_on=body.payment_date,
          recorded_by=token["id"],
          payment_method=body.payment_method,
          reference_number=body.reference_number,
     )
     db.commit()
     db.refresh(lease)
     return _build_lease_response(lease)


@router.post("/{lease_id}/activate")
def toggle_activation(
     lease_id: int,
     body: LeaseActivationRequest,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """Manual override: `{"action": "activate"|"deactivate", "reason": ...}`."""
     lease = _get_lease_or_404(db, lease_id)
     _require_landlord_access(lease, token)

     if body.action == "activate":
          LeaseService.activate(db, lease, token, body.reason or "")
          message = "Lease activated successfully"
     else:
          LeaseService.deactivate(db, lease, token, body.reason or "")
          message = "Lease deactivated successfully"
     db.commit()
     db.refresh(lease)

     return {
          "success": True,
          "message": message,
          "lease": _build_lease_response(lease),
     }


@router.get("/{lease_id}/document")
def get_lease_document(
     lease_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """Redirect to the uploaded lease document, or render the agreement as PDF."""
     lease = _get_lease_or_404(db, lease_id)
     LeaseService.check_access(lease, token)

     if lease.document_url:
          return RedirectResponse(lease.document_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

     return Response(
          content=generate_lease_pdf(lease),
          media_type="application/pdf",
          headers={"Content-Disposition": f'inline; filename="Lease_{lease.id}.pdf"'},
     )


@router.post("/{lease_id}/document", response_model=LeaseResponse)
def upload_lease_document(
     lease_id: int,
     document: UploadFile = File(...),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     lease = _get_lease_or_404(db, lease_id)
     _require_landlord_access(lease, token)
     if document.content_type not in ALLOWED_DOCUMENT_TYPES:
          raise HTTPException(
               status_code=status.HTTP_400_BAD_REQUEST,
               detail="Only PDF or Word documents can be uploaded"
          )

     previous_url = lease.document_url
     lease.document_url = upload_to_blob(
          document,
          config.LEASE_DOCUMENT_CONTAINER,
          lease.id,
          progress_callback=lambda percent: logger.debug("Lease %s document upload %s%%", lease.id, percent),
     )
     lease.document_name = document.filename
     lease.document_uploaded_at = utcnow()
     db.commit()
     db.refresh(lease)

     if previous_url:
          try:
               delete_from_blob(previous_url)
          except ExternalServiceError:
               logger.warning("Could not delete replaced lease document %s", previous_url)
     return _build_lease_response(lease)
