# routers/properties.py
"""
Property API routes.

Landlords list and manage their own properties; tenants browse the
available ones; managers and admins see everything.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_session
from dependencies import verify_token
from models import Property
from schemas.property import PropertyCreate, PropertyListResponse, PropertyResponse, PropertyUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/properties", tags=["properties"])


def _get_property_or_404(db: Session, property_id: int) -> Property:
     prop = db.query(Property).filter(Property.id == property_id).first()
     if not prop:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail="Property not found"
          )
     return prop


def _check_owner(prop: Property, token: dict) -> None:
     role = token.get("role")
     if role in ("admin", "manager"):
          return
     if role == "landlord" and prop.landlord_id == token.get("id"):
          return
     raise HTTPException(
          status_code=status.HTTP_403_FORBIDDEN,
          detail="You can only manage your own properties"
     )


def _scoped_query(db: Session, token: dict):
     query = db.query(Property)
     role = token.get("role")
     if role == "landlord":
          query = query.filter(Property.landlord_id == token.get("id"))
     elif role == "tenant":
          query = query.filter(Property.is_available.is_(True))
     return query


def _build_property_response(prop: Property) -> PropertyResponse:
     response = PropertyResponse.model_validate(prop)
     if prop.landlord is not None:
          response.landlord_name = prop.landlord.name
     return response


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(
     body: PropertyCreate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     if token.get("role") not in ("landlord", "manager", "admin"):
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="Only landlords can add properties"
          )
     data = body.model_dump()
     data["property_type"] = body.property_type.value
     prop = Property(landlord_id=token["id"], **data)
     db.add(prop)
     db.commit()
     db.refresh(prop)
     logger.info("Property %s created by user %s", prop.id, token["id"])
     return _build_property_response(prop)


@router.get("", response_model=PropertyListResponse)
def list_properties(
     available: Optional[bool] = Query(None, description="Filter by availability"),
     property_type: Optional[str] = Query(None),
     min_rent: Optional[float] = Query(None, ge=0),
     max_rent: Optional[float] = Query(None, ge=0),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=100),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     query = _scoped_query(db, token)
     if available is not None:
          query = query.filter(Property.is_available.is_(available))
     if property_type:
          query = query.filter(Property.property_type == property_type)
     if min_rent is not None:
          query = query.filter(Property.monthly_rent >= min_rent)
     if max_rent is not None:
          query = query.filter(Property.monthly_rent <= max_rent)

     total = query.count()
     properties = (
          query.order_by(Property.created_at.desc(), Property.id.desc())
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     return PropertyListResponse(
          properties=[_build_property_response(p) for p in properties],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get("/search", response_model=list[PropertyResponse])
def search_properties(
     q: str = Query(..., min_length=1, description="Matched against address, type and description"),
     limit: int = Query(20, ge=1, le=100),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     pattern = f"%{q.strip()}%"
     properties = (
          _scoped_query(db, token)
          .filter(or_(
               Property.address.ilike(pattern),
               Property.property_type.ilike(pattern),
               Property.description.ilike(pattern),
          ))
          .order_by(Property.address)
          .limit(limit)
          .all()
     )
     return [_build_property_response(p) for p in properties]


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(
     property_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     prop = _get_property_or_404(db, property_id)
     if token.get("role") == "landlord":
          _check_owner(prop, token)
     return _build_property_response(prop)


@router.put("/{property_id}", response_model=PropertyResponse)
def update_property(
     property_id: int,
     body: PropertyUpdate,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     prop = _get_property_or_404(db, property_id)
     _check_owner(prop, token)

     for field, value in body.model_dump(exclude_unset=True).items():
          if value is None and field != "description":
               continue
          if field == "property_type":
               value = value.value if hasattr(value, "value") else value
          setattr(prop, field, value)
     db.commit()
     db.refresh(prop)
     return _build_property_response(prop)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
     property_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     prop = _get_property_or_404(db, property_id)
     _check_owner(prop, token)
     if prop.active_lease_count:
          raise HTTPException(
               status_code=status.HTTP_400_BAD_REQUEST,
               detail="Cannot delete a property with an active lease"
          )
     db.delete(prop)
     db.commit()
     logger.info("Property %s deleted by user %s", property_id, token.get("id"))
     return None
