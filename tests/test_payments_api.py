from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from errors import ExternalServiceError
from models import Property


@pytest.fixture
def payment_payload(tenant, prop, active_lease):
     return {
          "tenant_id": tenant.id,
          "property_id": prop.id,
          "lease_id": active_lease.id,
          "amount": "5000.00",
          "payment_date": date.today().isoformat(),
          "payment_method": "mobile_money",
          "reference_number": "MM-88213",
     }


def test_record_completed_payment(client, auth, db, landlord, active_lease, payment_payload):
     response = client.post("/api/payments", json=payment_payload, headers=auth(landlord))

     assert response.status_code == 201
     body = response.json()
     assert body["status"] == "completed"
     assert body["approval_status"] == "approved"
     assert body["receipt_number"].startswith(f"PAY-{date.today():%Y%m%d}-")
     db.refresh(active_lease)
     assert active_lease.total_paid == Decimal("5000.00")


def test_duplicate_payment_conflicts(client, auth, landlord, payment_payload):
     client.post("/api/payments", json=payment_payload, headers=auth(landlord))
     response = client.post("/api/payments", json=payment_payload, headers=auth(landlord))

     assert response.status_code == 409
     assert response.json() == {"error": "Duplicate payment detected"}


def test_tenant_cannot_record_payment(client, auth, tenant, payment_payload):
     response = client.post("/api/payments", json=payment_payload, headers=auth(tenant))
     assert response.status_code == 403


def test_invalid_payment_method(client, auth, landlord, payment_payload):
     payment_payload["payment_method"] = "seashells"
     response = client.post("/api/payments", json=payment_payload, headers=auth(landlord))
     assert response.status_code == 400
     assert response.json() == {"error": "Invalid payment method: seashells"}


def test_pending_payment_approval(client, auth, landlord, payment_payload):
     payment_payload["status"] = "pending"
     payment_id = client.post("/api/payments", json=payment_payload, headers=auth(landlord)).json()["id"]

     response = client.get(f"/api/payments/{payment_id}/receipt", headers=auth(landlord))
     assert response.status_code == 400

     response = client.post(f"/api/payments/{payment_id}/approve", json={"notes": "Seen on statement"},
                            headers=auth(landlord))
     assert response.status_code == 200
     assert response.json()["status"] == "completed"

     response = client.post(f"/api/payments/{payment_id}/approve", headers=auth(landlord))
     assert response.status_code == 400

     response = client.get(f"/api/payments/{payment_id}/receipt", headers=auth(landlord))
     assert response.status_code == 200
     assert response.content.startswith(b"%PDF")


def test_reject_needs_reason(client, auth, landlord, payment_payload):
     payment_payload["status"] = "pending"
     payment_id = client.post("/api/payments", json=payment_payload, headers=auth(landlord)).json()["id"]

     response = client.post(f"/api/payments/{payment_id}/reject", headers=auth(landlord))
     assert response.status_code == 400
     assert response.json() == {"error": "Rejection reason is required"}

     response = client.post(f"/api/payments/{payment_id}/reject", json={"reason": "Bounced"}, headers=auth(landlord))
     assert response.json()["status"] == "failed"
     assert response.json()["rejection_reason"] == "Bounced"


def test_cancel_is_for_staff(client, auth, landlord, admin, payment_payload):
     payment_id = client.post("/api/payments", json=payment_payload, headers=auth(landlord)).json()["id"]

     assert client.post(f"/api/payments/{payment_id}/cancel", headers=auth(landlord)).status_code == 403
     response = client.post(f"/api/payments/{payment_id}/cancel", json={"reason": "Entered twice"}, headers=auth(admin))
     assert response.json()["status"] == "cancelled"
     assert response.json()["cancellation_reason"] == "Entered twice"


def test_list_payments_scoped(client, auth, landlord, other_landlord, tenant, payment_payload):
     client.post("/api/payments", json=payment_payload, headers=auth(landlord))

     assert client.get("/api/payments", headers=auth(tenant)).json()["total"] == 1
     assert client.get("/api/payments", headers=auth(landlord)).json()["total"] == 1
     assert client.get("/api/payments", headers=auth(other_landlord)).json()["total"] == 0


def test_other_tenant_cannot_view_payment(client, auth, make_user, landlord, payment_payload):
     payment_id = client.post("/api/payments", json=payment_payload, headers=auth(landlord)).json()["id"]
     stranger = make_user("tenant")

     assert client.get(f"/api/payments/{payment_id}", headers=auth(stranger)).status_code == 403


def test_receipt_emailed_when_configured(client, auth, landlord, payment_payload):
     with patch("services.payment_service.email.is_email_configured", return_value=True), \
               patch("services.payment_service.email.send_receipt_email") as send:
          response = client.post("/api/payments", json=payment_payload, headers=auth(landlord))

     assert response.status_code == 201
     payment, pdf_bytes = send.call_args.args
     assert payment.receipt_number == response.json()["receipt_number"]
     assert pdf_bytes.startswith(b"%PDF")


def test_receipt_email_failure_does_not_fail_payment(client, auth, landlord, payment_payload):
     with patch("services.payment_service.email.is_email_configured", return_value=True), \
               patch("services.payment_service.email.send_receipt_email", side_effect=ExternalServiceError("down")):
          response = client.post("/api/payments", json=payment_payload, headers=auth(landlord))

     assert response.status_code == 201


@pytest.fixture
def sent_invoice(client, auth, landlord, tenant, prop):
     payload = {
          "tenant_id": tenant.id,
          "property_id": prop.id,
          "items": [{"description": "Monthly Rent", "quantity": 1, "unit_price": "5000.00"}],
          "due_date": (date.today() + timedelta(days=10)).isoformat(),
     }
     invoice_id = client.post("/api/invoices", json=payload, headers=auth(landlord)).json()["id"]
     client.post(f"/api/invoices/{invoice_id}/send", headers=auth(landlord))
     return invoice_id


def test_payment_cannot_target_another_landlords_records(client, auth, db, other_landlord, tenant, landlord,
                                                         active_lease, sent_invoice):
     own = Property(address="9 Chilenje Road", property_type="House", monthly_rent=Decimal("4000.00"),
                    landlord_id=other_landlord.id, is_available=True, images=[])
     db.add(own)
     db.commit()
     payload = {"tenant_id": tenant.id, "property_id": own.id, "amount": "5000.00"}

     response = client.post("/api/payments", json={**payload, "invoice_id": sent_invoice}, headers=auth(other_landlord))
     assert response.status_code == 400
     assert response.json() == {"error": "Invoice does not belong to this tenant and property"}

     response = client.post("/api/payments", json={**payload, "lease_id": active_lease.id}, headers=auth(other_landlord))
     assert response.status_code == 400

     invoice = client.get(f"/api/invoices/{sent_invoice}", headers=auth(landlord)).json()
     assert invoice["status"] == "sent"
     assert Decimal(str(invoice["paid_amount"])) == Decimal("0")


def test_cancelling_completed_payment_reopens_invoice(client, auth, db, landlord, admin, active_lease,
                                                      payment_payload, sent_invoice):
     payment = client.post("/api/payments", json={**payment_payload, "invoice_id": sent_invoice},
                           headers=auth(landlord)).json()
     assert client.get(f"/api/invoices/{sent_invoice}", headers=auth(landlord)).json()["status"] == "paid"

     response = client.post(f"/api/payments/{payment['id']}/cancel", json={"reason": "Bounced"}, headers=auth(admin))
     assert response.status_code == 200

     invoice = client.get(f"/api/invoices/{sent_invoice}", headers=auth(landlord)).json()
     assert invoice["status"] == "sent"
     assert Decimal(str(invoice["paid_amount"])) == Decimal("0")
     assert Decimal(str(invoice["outstanding_amount"])) == Decimal("5000.00")
     db.refresh(active_lease)
     assert active_lease.total_paid == Decimal("0")
