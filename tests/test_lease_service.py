from datetime import date, timedelta
from decimal import Decimal

import pytest

from errors import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from models import Lease, Notification, Payment, PropertyRequest
from services.lease_service import LeaseService
from tests.conftest import actor


def _lease_data(prop, tenant, **overrides):
     data = {
          "property_id": prop.id,
          "tenant_id": tenant.id,
          "start_date": date(2026, 3, 1),
          "end_date": date(2027, 2, 28),
          "monthly_rent": Decimal("5000"),
          "security_deposit": Decimal("2500"),
          "payment_due_day": 5,
          "terms": {"pets_allowed": False},
     }
     data.update(overrides)
     return data


def _signed_lease(db, prop, tenant, landlord):
     lease = LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)
     LeaseService.send_to_tenant(db, lease, actor(landlord))
     LeaseService.sign_by_tenant(db, lease, actor(tenant), "Tom Tenant", "127.0.0.1", "Tom Tenant")
     db.commit()
     return lease


def test_create_lease_starts_as_draft(db, prop, tenant, landlord):
     lease = LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)
     db.commit()

     assert lease.status == "draft"
     assert lease.first_payment_required == Decimal("7500.00")
     assert lease.status_history[0]["status"] == "draft"
     assert lease.terms == {"pets_allowed": False}


def test_create_lease_validation(db, prop, tenant, landlord, other_landlord):
     with pytest.raises(ValidationError):
          LeaseService.create_lease(db, _lease_data(prop, tenant, end_date=date(2026, 2, 1)), landlord.id)
     with pytest.raises(ValidationError):
          LeaseService.create_lease(db, _lease_data(prop, tenant, payment_due_day=32), landlord.id)
     with pytest.raises(PermissionDeniedError):
          LeaseService.create_lease(db, _lease_data(prop, tenant), other_landlord.id)
     with pytest.raises(NotFoundError):
          LeaseService.create_lease(db, _lease_data(prop, tenant, tenant_id=landlord.id), landlord.id)


def test_full_lifecycle_to_active(db, prop, tenant, landlord):
     lease = _signed_lease(db, prop, tenant, landlord)
     assert lease.status == "signed"
     assert lease.tenant_signed is True
     assert lease.tenant_signature_ip == "127.0.0.1"
     assert lease.balance_due == Decimal("7500.00")
     assert lease.is_fully_signed is True
     assert lease.ready_for_activation is False

     LeaseService.record_first_payment(db, lease, Decimal("7500"), paid_on=date(2026, 2, 25), recorded_by=landlord.id)
     db.commit()

     assert lease.status == "active"
     assert lease.first_payment_made is True
     assert lease.balance_due == Decimal("0")
     assert lease.ready_for_activation is True
     assert lease.next_payment_due == date(2026, 4, 5)
     assert [entry["status"] for entry in lease.status_history] == ["draft", "pending_signature", "signed", "active"]

     db.refresh(tenant)
     db.refresh(prop)
     assert tenant.current_lease_id == lease.id
     assert prop.is_available is False

     payment = db.query(Payment).filter(Payment.lease_id == lease.id).one()
     assert payment.payment_type == "deposit"
     assert payment.status == "completed"

     welcome = db.query(Notification).filter(Notification.recipient_id == tenant.id,
                                             Notification.title == "Lease Activated!").one()
     assert welcome.type == "lease_approved"
     assert welcome.priority == "high"
     assert welcome.related_lease_id == lease.id


def test_first_payment_below_required_is_rejected(db, prop, tenant, landlord):
     lease = _signed_lease(db, prop, tenant, landlord)

     with pytest.raises(ValidationError):
          LeaseService.record_first_payment(db, lease, Decimal("5000"))
     assert lease.status == "signed"


def test_first_payment_needs_signed_lease(db, prop, tenant, landlord):
     lease = LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)

     with pytest.raises(InvalidStateError):
          LeaseService.record_first_payment(db, lease, Decimal("7500"))


def test_only_the_lease_tenant_can_sign(db, prop, tenant, landlord, make_user):
     lease = LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)
     LeaseService.send_to_tenant(db, lease, actor(landlord))
     stranger = make_user("tenant")

     with pytest.raises(PermissionDeniedError):
          LeaseService.sign_by_tenant(db, lease, actor(stranger), "sig", "10.0.0.1")


def test_sign_requires_pending_signature(db, prop, tenant, landlord):
     lease = LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)

     with pytest.raises(InvalidStateError):
          LeaseService.sign_by_tenant(db, lease, actor(tenant), "sig", "10.0.0.1")


def test_manual_activation_and_deactivation(db, prop, tenant, landlord):
     lease = LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)

     LeaseService.activate(db, lease, actor(landlord), "Paid in cash", today=date(2026, 3, 10))
     assert lease.status == "active"
     assert lease.next_payment_due == date(2026, 4, 5)
     with pytest.raises(InvalidStateError):
          LeaseService.activate(db, lease, actor(landlord))

     LeaseService.deactivate(db, lease, actor(landlord), "Tenant moved out")
     assert lease.status == "draft"
     assert lease.status_history[-1]["note"] == "Tenant moved out"
     with pytest.raises(InvalidStateError):
          LeaseService.deactivate(db, lease, actor(landlord))


def test_terminated_lease_cannot_be_activated(db, prop, tenant, landlord):
     lease = LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)
     lease.status = "terminated"

     with pytest.raises(InvalidStateError):
          LeaseService.activate(db, lease, actor(landlord))


@pytest.mark.parametrize(
     "start, due_day, today, expected",
     [
          (date(2026, 1, 15), 1, date(2026, 3, 10), date(2026, 4, 1)),
          (date(2026, 1, 15), 20, date(2026, 3, 10), date(2026, 3, 20)),
          (date(2026, 5, 15), 1, date(2026, 3, 10), date(2026, 6, 1)),
          (date(2026, 5, 15), 31, date(2026, 3, 10), date(2026, 5, 31)),
     ],
)
def test_calculate_next_payment_due(start, due_day, today, expected):
     lease = Lease(start_date=start, payment_due_day=due_day)
     assert LeaseService.calculate_next_payment_due(lease, today) == expected


def test_next_action_follows_status():
     lease = Lease(status="draft", first_payment_required=Decimal("7500"))
     assert LeaseService.get_next_action(lease)["action"] == "send_to_tenant"

     lease.status = "signed"
     action = LeaseService.get_next_action(lease)
     assert action["actor"] == "tenant"
     assert "K7,500.00" in action["message"]

     today = date(2026, 3, 1)
     lease.status = "active"
     lease.next_payment_due = today + timedelta(days=3)
     assert LeaseService.get_next_action(lease, today)["message"] == "Next rent payment due in 3 days"
     lease.next_payment_due = today + timedelta(days=20)
     assert LeaseService.get_next_action(lease, today)["action"] == "active_lease"


def test_create_from_property_request(db, prop, tenant, landlord):
     request = PropertyRequest(
          tenant_id=tenant.id,
          request_type="existing_property",
          property_id=prop.id,
          landlord_id=landlord.id,
          status="approved",
          messages=[],
     )
     db.add(request)
     db.commit()

     terms = _lease_data(prop, tenant)
     del terms["property_id"], terms["tenant_id"]
     lease = LeaseService.create_from_property_request(db, request.id, landlord.id, terms)
     db.commit()

     assert lease.property_request_id == request.id
     assert request.status == "lease_requested"
     notice = db.query(Notification).filter(Notification.recipient_id == tenant.id).one()
     assert notice.related_lease_id == lease.id


def test_tenants_requiring_action(db, prop, tenant, landlord, other_landlord):
     pending = LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)
     LeaseService.send_to_tenant(db, pending, actor(landlord))
     LeaseService.create_lease(db, _lease_data(prop, tenant), landlord.id)
     db.commit()

     assert [lease.id for lease in LeaseService.tenants_requiring_action(db, landlord.id)] == [pending.id]
     assert LeaseService.tenants_requiring_action(db, other_landlord.id) == []
