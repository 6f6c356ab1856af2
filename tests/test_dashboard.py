from datetime import date
from decimal import Decimal

import pytest

from models import MaintenanceRequest, Payment, Property
from services.dashboard_service import get_dashboard_stats, stats_cache
from tests.conftest import actor

TODAY = date(2026, 3, 15)


def _payment(db, tenant, property_id, receipt, amount, paid_on, status="completed"):
     payment = Payment(
          receipt_number=receipt,
          tenant_id=tenant.id,
          property_id=property_id,
          amount=Decimal(amount),
          payment_date=paid_on,
          payment_method="cash",
          payment_type="rent",
          status=status,
          approval_status="approved" if status == "completed" else "pending",
          approval_history=[],
     )
     db.add(payment)
     return payment


@pytest.fixture
def portfolio(db, landlord, other_landlord, tenant, prop, active_lease):
     vacant = Property(address="7 Vacant Close", property_type="Apartment", monthly_rent=Decimal("2000.00"),
                       landlord_id=landlord.id, is_available=True, images=[])
     elsewhere = Property(address="1 Elsewhere Avenue", property_type="House", monthly_rent=Decimal("9000.00"),
                          landlord_id=other_landlord.id, is_available=True, images=[])
     db.add_all([vacant, elsewhere])
     db.flush()

     _payment(db, tenant, prop.id, "PAY-1", "2500.00", date(2026, 3, 5))
     _payment(db, tenant, prop.id, "PAY-2", "5000.00", date(2026, 2, 20))
     _payment(db, tenant, prop.id, "PAY-3", "1000.00", date(2026, 3, 10), status="pending")
     _payment(db, tenant, elsewhere.id, "PAY-4", "9000.00", date(2026, 3, 2))
     db.add(MaintenanceRequest(
          property_id=prop.id, tenant_id=tenant.id, landlord_id=landlord.id,
          title="Leaking tap", description="Kitchen tap drips", category="Plumbing", created_by=tenant.id,
     ))
     db.commit()


def test_landlord_stats(db, landlord, portfolio):
     stats = get_dashboard_stats(db, actor(landlord), today=TODAY)

     assert stats["cached"] is False
     assert stats["properties"] == 2
     assert stats["active_leases"] == 1
     assert stats["tenants"] == 1
     assert stats["occupancy_rate"] == 50
     assert stats["monthly_rent"] == Decimal("5000.00")
     assert stats["this_month_collected"] == Decimal("2500.00")
     assert stats["this_month_payments"] == 1
     assert stats["collection_rate"] == 50
     assert stats["pending_payments"] == 1
     assert stats["pending_maintenance"] == 1
     assert stats["overdue_invoices"] == 0
     assert stats["currency"] == "ZMW"


def test_admin_sees_everything(db, admin, portfolio):
     stats = get_dashboard_stats(db, actor(admin), today=TODAY)

     assert stats["properties"] == 3
     assert stats["this_month_collected"] == Decimal("11500.00")
     assert stats["this_month_payments"] == 2


def test_tenant_stats(db, tenant, portfolio):
     stats = get_dashboard_stats(db, actor(tenant), today=TODAY)

     assert stats["properties"] == 1
     assert stats["active_leases"] == 1
     assert stats["pending_payments"] == 1


def test_stats_are_cached_per_user(db, landlord, other_landlord, portfolio):
     get_dashboard_stats(db, actor(landlord), today=TODAY)

     assert get_dashboard_stats(db, actor(landlord), today=TODAY)["cached"] is True
     assert get_dashboard_stats(db, actor(other_landlord), today=TODAY)["cached"] is False
     assert stats_cache.stats()["size"] == 2


def test_stats_endpoint_cache_and_refresh(client, auth, landlord, prop):
     first = client.get("/api/dashboard/stats", headers=auth(landlord))
     assert first.status_code == 200
     assert first.json()["cached"] is False
     assert first.json()["properties"] == 1

     assert client.get("/api/dashboard/stats", headers=auth(landlord)).json()["cached"] is True
     refreshed = client.get("/api/dashboard/stats", params={"refresh": "true"}, headers=auth(landlord))
     assert refreshed.json()["cached"] is False


def test_stats_require_login(client):
     assert client.get("/api/dashboard/stats").status_code == 401
