# routers/maintenance.py
"""
Maintenance request API routes.

Tenants report problems on their property; landlords and staff move the
requests through Pending -> In Progress -> Completed, with notes along the
way. Tenants never see internal notes.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

import config
from azure_blob import upload_to_blob
from database import get_session
from dependencies import verify_token
from models import MaintenanceRequest
from schemas.maintenance import (
     FeedbackRequest,
     MaintenanceCreate,
     MaintenanceListResponse,
     MaintenanceNoteResponse,
     MaintenanceResponse,
     MaintenanceUpdate,
     NoteCreate,
)
from services.maintenance_service import MaintenanceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])

IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")


def _get_request_or_404(db: Session, request_id: int) -> MaintenanceRequest:
     request = db.query(MaintenanceRequest).filter(MaintenanceRequest.id == request_id).first()
     if not request:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail="Maintenance request not found"
          )
     return request


def _build_response(request: MaintenanceRequest, token: dict) -> MaintenanceResponse:
     response = MaintenanceResponse.model_validate(request)
     response.notes = [MaintenanceNoteResponse.model_validate(n) for n in MaintenanceService.visible_notes(request, token)]
     if request.premises is not None:
          response.property_address = request.premises.address
     return response


@router.post("", response_model=MaintenanceResponse, status_code=status.HTTP_201_CREATED)
def create_maintenance_request(
     body: MaintenanceCreate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     request = MaintenanceService.create_request(db, body.model_dump(exclude_none=True), token)
     db.commit()
     db.refresh(request)
     return _build_response(request, token)


@router.get("", response_model=MaintenanceListResponse)
def list_maintenance_requests(
     status_filter: Optional[str] = Query(None, alias="status"),
     priority: Optional[str] = Query(None),
     property_id: Optional[int] = Query(None),
     search: Optional[str] = Query(None),
     page: int = Query(1, ge=1),
     page_size: int = Query(20, ge=1, le=100),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     requests, total = MaintenanceService.list_requests(
          db,
          token,
          status=status_filter,
          priority=priority,
          property_id=property_id,
          search=search,
          page=page,
          page_size=page_size,
     )
     return MaintenanceListResponse(
          requests=[_build_response(r, token) for r in requests],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get("/overdue", response_model=list[MaintenanceResponse])
def list_overdue_requests(
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """Open requests whose due date has passed."""
     return [_build_response(r, token) for r in MaintenanceService.overdue_requests(db, token)]


@router.get("/emergency", response_model=list[MaintenanceResponse])
def list_emergency_requests(
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     return [_build_response(r, token) for r in MaintenanceService.emergency_requests(db, token)]


@router.get("/{request_id}", response_model=MaintenanceResponse)
def get_maintenance_request(
     request_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     request = _get_request_or_404(db, request_id)
     MaintenanceService.check_access(request, token)
     return _build_response(request, token)


@router.put("/{request_id}", response_model=MaintenanceResponse)
def update_maintenance_request(
     request_id: int,
     body: MaintenanceUpdate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     request = _get_request_or_404(db, request_id)
     MaintenanceService.update_request(db, request, body.model_dump(exclude_unset=True), token)
     db.commit()
     db.refresh(request)
     return _build_response(request, token)


@router.post("/{request_id}/notes", response_model=MaintenanceNoteResponse, status_code=status.HTTP_201_CREATED)
def add_maintenance_note(
     request_id: int,
     body: NoteCreate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     request = _get_request_or_404(db, request_id)
     note = MaintenanceService.add_note(db, request, token, body.content, body.is_internal)
     db.commit()
     db.refresh(note)
     return note


@router.post("/{request_id}/feedback", response_model=MaintenanceResponse)
def leave_feedback(
     request_id: int,
     body: FeedbackRequest,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     request = _get_request_or_404(db, request_id)
     MaintenanceService.set_tenant_feedback(db, request, token, body.rating, body.feedback)
     db.commit()
     db.refresh(request)
     return _build_response(request, token)


@router.post("/{request_id}/images", response_model=MaintenanceResponse)
def upload_maintenance_image(
     request_id: int,
     image: UploadFile = File(...),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     request = _get_request_or_404(db, request_id)
     MaintenanceService.check_access(request, token)
     if image.content_type not in IMAGE_TYPES:
          raise HTTPException(
               status_code=status.HTTP_400_BAD_REQUEST,
               detail="Only JPEG, PNG, WebP or GIF images can be uploaded"
          )

     url = upload_to_blob(image, config.MAINTENANCE_IMAGE_CONTAINER, request.id)
     MaintenanceService.add_image(db, request, url)
     db.commit()
     db.refresh(request)
     return _build_response(request, token)
