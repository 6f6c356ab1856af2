from decimal import Decimal

import pytest

from errors import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from models import Notification, Property
from services.property_request_service import PropertyRequestService


def _new_property_request(db, tenant, **overrides):
     data = {
          "request_type": "new_property",
          "address": "7 Leopards Hill Road, Lusaka",
          "estimated_rent": Decimal("4500"),
          "bedrooms": 2,
          "property_type": "Apartment",
          "landlord_email": "landlord@example.com",
          "message": "Please list this flat",
     }
     data.update(overrides)
     request = PropertyRequestService.create_request(db, tenant.id, data)
     db.commit()
     return request


def test_existing_property_request_routes_to_owner(db, tenant, landlord, prop):
     request = PropertyRequestService.create_request(
          db, tenant.id, {"request_type": "existing_property", "property_id": prop.id}
     )
     db.commit()

     assert request.landlord_id == landlord.id
     assert request.status == "pending"
     notice = db.query(Notification).filter(Notification.recipient_id == landlord.id).one()
     assert notice.type == "tenant_registration"


def test_new_property_request_matches_landlord_email(db, tenant, landlord):
     request = _new_property_request(db, tenant)

     assert request.landlord_id == landlord.id
     assert request.messages[0]["message"] == "Please list this flat"
     notice = db.query(Notification).filter(Notification.recipient_id == landlord.id).one()
     assert notice.type == "property_request"


def test_create_request_validation(db, tenant):
     with pytest.raises(ValidationError):
          PropertyRequestService.create_request(db, tenant.id, {})
     with pytest.raises(ValidationError):
          PropertyRequestService.create_request(db, tenant.id, {"request_type": "existing_property"})
     with pytest.raises(NotFoundError):
          PropertyRequestService.create_request(db, tenant.id, {"request_type": "existing_property", "property_id": 999})
     with pytest.raises(ValidationError):
          PropertyRequestService.create_request(db, tenant.id, {"request_type": "new_property"})
     with pytest.raises(ValidationError):
          PropertyRequestService.create_request(
               db, tenant.id, {"request_type": "new_property", "address": "x", "property_type": "Castle"}
          )


def test_approve_with_property_creation(db, tenant, landlord):
     request = _new_property_request(db, tenant)

     PropertyRequestService.approve_request(
          db, request.id, landlord.id, "Happy to list it", property_details={"monthly_rent": Decimal("4800")}
     )
     db.commit()

     assert request.status == "property_created"
     assert request.next_steps
     prop = db.query(Property).filter(Property.id == request.property_id).one()
     assert prop.landlord_id == landlord.id
     assert prop.address == "7 Leopards Hill Road, Lusaka"
     assert prop.monthly_rent == Decimal("4800.00")
     assert "&property=" in PropertyRequestService.lease_creation_url(request)


def test_unassigned_request_is_claimed_by_matching_email(db, tenant, make_user):
     request = _new_property_request(db, tenant, landlord_email="late@example.com")
     assert request.landlord_id is None
     late = make_user("landlord", email="late@example.com")

     PropertyRequestService.approve_request(db, request.id, late.id, "Welcome")
     assert request.landlord_id == late.id
     assert request.status == "approved"


def test_only_landlord_accounts_claim_by_email(db, tenant, make_user):
     request = _new_property_request(db, tenant, landlord_email="shared@example.com")
     lookalike = make_user("tenant", email="shared@example.com")

     with pytest.raises(PermissionDeniedError):
          PropertyRequestService.reject_request(db, request.id, lookalike.id, "No")
     assert request.landlord_id is None


def test_reject_checks_reason_before_lookup(db, tenant, landlord, other_landlord):
     with pytest.raises(ValidationError):
          PropertyRequestService.reject_request(db, 999, landlord.id, "  ")
     with pytest.raises(NotFoundError):
          PropertyRequestService.reject_request(db, 999, landlord.id, "No")

     request = _new_property_request(db, tenant)
     with pytest.raises(PermissionDeniedError):
          PropertyRequestService.reject_request(db, request.id, other_landlord.id, "No")

     PropertyRequestService.reject_request(db, request.id, landlord.id, "Not available")
     db.commit()
     assert request.status == "rejected"
     assert request.response_message == "Not available"

     with pytest.raises(InvalidStateError):
          PropertyRequestService.reject_request(db, request.id, landlord.id, "Again")


def test_status_counts_for_landlord(db, tenant, landlord, prop):
     _new_property_request(db, tenant)
     PropertyRequestService.create_request(db, tenant.id, {"request_type": "existing_property", "property_id": prop.id})
     db.commit()

     counts = PropertyRequestService.status_counts(db, landlord)
     assert counts["pending"] == 2
     assert counts["approved"] == 0
