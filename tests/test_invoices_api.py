from datetime import date, timedelta
from decimal import Decimal

import pytest

from models import Invoice


@pytest.fixture
def invoice_payload(tenant, prop):
     return {
          "tenant_id": tenant.id,
          "property_id": prop.id,
          "items": [
               {"description": "Monthly Rent", "quantity": 1, "unit_price": "1000.00"},
               {"description": "Refuse collection", "quantity": 1, "unit_price": "50.00"},
          ],
          "due_date": (date.today() + timedelta(days=10)).isoformat(),
          "tax_amount": "0",
     }


@pytest.fixture
def created_invoice(client, auth, landlord, invoice_payload):
     response = client.post("/api/invoices", json=invoice_payload, headers=auth(landlord))
     assert response.status_code == 201
     return response.json()


def test_create_invoice(created_invoice, tenant):
     assert created_invoice["status"] == "draft"
     assert Decimal(str(created_invoice["total_amount"])) == Decimal("1050.00")
     assert created_invoice["tenant_name"] == tenant.name
     assert created_invoice["property_address"] == "12 Kabulonga Road, Lusaka"
     assert created_invoice["invoice_number"].startswith("INV-")
     assert len(created_invoice["items"]) == 2
     assert created_invoice["is_overdue"] is False


def test_tenant_cannot_create_invoice(client, auth, tenant, invoice_payload):
     response = client.post("/api/invoices", json=invoice_payload, headers=auth(tenant))
     assert response.status_code == 403
     assert response.json() == {"error": "Insufficient permissions to create invoices"}


def test_landlord_cannot_bill_someone_elses_property(client, auth, other_landlord, invoice_payload):
     response = client.post("/api/invoices", json=invoice_payload, headers=auth(other_landlord))
     assert response.status_code == 403


def test_create_invoice_needs_items(client, auth, landlord, invoice_payload):
     invoice_payload["items"] = []
     response = client.post("/api/invoices", json=invoice_payload, headers=auth(landlord))
     assert response.status_code == 422
     assert response.json()["error"] == "Validation failed"


def test_requests_need_a_token(client):
     response = client.get("/api/invoices")
     assert response.status_code == 401
     assert response.json() == {"error": "Unauthorized"}


def test_unknown_invoice_and_route(client, auth, landlord):
     response = client.get("/api/invoices/999", headers=auth(landlord))
     assert response.status_code == 404
     assert response.json() == {"error": "Invoice not found"}

     response = client.get("/api/nothing-here", headers=auth(landlord))
     assert response.status_code == 404
     assert response.json() == {"error": "Route not found"}


def test_list_is_scoped_by_role(client, auth, landlord, other_landlord, tenant, manager, created_invoice):
     assert client.get("/api/invoices", headers=auth(landlord)).json()["total"] == 1
     assert client.get("/api/invoices", headers=auth(tenant)).json()["total"] == 1
     assert client.get("/api/invoices", headers=auth(manager)).json()["total"] == 1
     assert client.get("/api/invoices", headers=auth(other_landlord)).json()["total"] == 0

     response = client.get("/api/invoices", params={"status": "paid"}, headers=auth(landlord))
     assert response.json()["invoices"] == []


def test_send_then_tenant_view_marks_viewed(client, auth, landlord, tenant, created_invoice):
     invoice_id = created_invoice["id"]

     response = client.post(f"/api/invoices/{invoice_id}/send", headers=auth(landlord))
     assert response.status_code == 200
     assert response.json()["invoice"]["status"] == "sent"

     response = client.get(f"/api/invoices/{invoice_id}", headers=auth(tenant))
     assert response.json()["status"] == "viewed"

     notifications = client.get("/api/notifications", headers=auth(tenant)).json()
     assert notifications["unread_count"] == 1
     assert notifications["notifications"][0]["type"] == "invoice_created"


def test_tenant_has_read_only_access(client, auth, tenant, created_invoice):
     response = client.post(f"/api/invoices/{created_invoice['id']}/send", headers=auth(tenant))
     assert response.status_code == 403
     assert response.json() == {"error": "Tenants have read-only access to invoices"}


def test_other_tenant_cannot_view(client, auth, make_user, created_invoice):
     stranger = make_user("tenant")
     response = client.get(f"/api/invoices/{created_invoice['id']}", headers=auth(stranger))
     assert response.status_code == 403
     assert response.json() == {"error": "You can only view your own invoices"}


def test_mark_paid_flow(client, auth, landlord, created_invoice):
     invoice_id = created_invoice["id"]
     client.post(f"/api/invoices/{invoice_id}/send", headers=auth(landlord))

     response = client.post(f"/api/invoices/{invoice_id}/mark-paid", json={"amount": "400.00"}, headers=auth(landlord))
     assert response.status_code == 200
     body = response.json()
     assert body["receipt_number"].startswith("PAY-")
     assert body["invoice"]["status"] == "sent"
     assert Decimal(str(body["invoice"]["outstanding_amount"])) == Decimal("650.00")

     response = client.post(f"/api/invoices/{invoice_id}/mark-paid", json={"amount": "700.00"}, headers=auth(landlord))
     assert response.status_code == 400
     assert "cannot exceed outstanding balance" in response.json()["error"]

     response = client.post(f"/api/invoices/{invoice_id}/mark-paid", headers=auth(landlord))
     assert response.json()["invoice"]["status"] == "paid"

     payments = client.get(f"/api/invoices/{invoice_id}/payments", headers=auth(landlord)).json()
     assert len(payments) == 2


def test_mark_paid_on_draft_is_invalid_state(client, auth, landlord, created_invoice):
     response = client.post(f"/api/invoices/{created_invoice['id']}/mark-paid", headers=auth(landlord))
     assert response.status_code == 400
     assert response.json() == {"error": "Only sent, viewed, or overdue invoices can be marked as paid"}


def test_invalid_action(client, auth, landlord, created_invoice):
     response = client.post(f"/api/invoices/{created_invoice['id']}/archive", headers=auth(landlord))
     assert response.status_code == 400
     assert response.json() == {"error": "Invalid action"}


def test_approve_needs_manager(client, auth, landlord, manager, created_invoice):
     invoice_id = created_invoice["id"]
     response = client.post(f"/api/invoices/{invoice_id}/approve", headers=auth(landlord))
     assert response.status_code == 403

     response = client.post(f"/api/invoices/{invoice_id}/approve", json={"notes": "ok"}, headers=auth(manager))
     assert response.status_code == 200
     assert response.json()["invoice"]["approval_status"] == "approved"


def test_remind_and_duplicate(client, auth, landlord, created_invoice):
     invoice_id = created_invoice["id"]
     client.post(f"/api/invoices/{invoice_id}/send", headers=auth(landlord))

     response = client.post(f"/api/invoices/{invoice_id}/remind", headers=auth(landlord))
     assert response.json()["reminders_sent"] == 1

     response = client.post(f"/api/invoices/{invoice_id}/duplicate", headers=auth(landlord))
     copy = response.json()["invoice"]
     assert copy["id"] != invoice_id
     assert copy["status"] == "draft"


def test_update_draft_invoice(client, auth, landlord, created_invoice):
     response = client.put(
          f"/api/invoices/{created_invoice['id']}",
          json={"items": [{"description": "Rent", "unit_price": "900.00"}], "notes": "Discounted"},
          headers=auth(landlord),
     )
     assert response.status_code == 200
     assert Decimal(str(response.json()["total_amount"])) == Decimal("900.00")
     assert response.json()["notes"] == "Discounted"


def test_download_pdf(client, auth, tenant, created_invoice):
     response = client.get(f"/api/invoices/{created_invoice['id']}/pdf", headers=auth(tenant))
     assert response.status_code == 200
     assert response.headers["content-type"] == "application/pdf"
     assert created_invoice["invoice_number"] in response.headers["content-disposition"]
     assert response.content.startswith(b"%PDF")


def test_delete_rules(client, auth, db, landlord, admin, created_invoice):
     invoice_id = created_invoice["id"]
     assert client.delete(f"/api/invoices/{invoice_id}", headers=auth(landlord)).status_code == 403

     assert client.delete(f"/api/invoices/{invoice_id}", headers=auth(admin)).status_code == 204
     db.expire_all()
     assert db.query(Invoice).filter(Invoice.id == invoice_id).first() is None


def test_tenant_summary_endpoint(client, auth, landlord, other_landlord, tenant, created_invoice):
     own = client.get("/api/invoices/summary", headers=auth(tenant)).json()
     assert own["total_invoices"] == 1
     assert own["draft"]["count"] == 1
     assert Decimal(str(own["outstanding"])) == Decimal("1050.00")

     by_landlord = client.get("/api/invoices/summary", params={"tenant_id": tenant.id}, headers=auth(landlord)).json()
     assert by_landlord["total_invoices"] == 1
     by_other = client.get("/api/invoices/summary", params={"tenant_id": tenant.id}, headers=auth(other_landlord)).json()
     assert by_other["total_invoices"] == 0

     response = client.get("/api/invoices/summary", headers=auth(landlord))
     assert response.status_code == 400
     assert response.json() == {"error": "tenant_id is required"}
