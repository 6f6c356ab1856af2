import pytest

from models import Notification


@pytest.fixture
def new_property_request(client, auth, tenant, landlord):
     response = client.post(
          "/api/property-requests",
          json={
               "request_type": "new_property",
               "address": "7 Leopards Hill Road, Lusaka",
               "estimated_rent": 4500,
               "bedrooms": 2,
               "property_type": "Apartment",
               "landlord_email": "landlord@example.com",
          },
          headers=auth(tenant),
     )
     assert response.status_code == 201
     return response.json()


def test_only_tenants_submit(client, auth, landlord, prop):
     response = client.post(
          "/api/property-requests",
          json={"request_type": "existing_property", "property_id": prop.id},
          headers=auth(landlord),
     )
     assert response.status_code == 403
     assert response.json() == {"error": "Only tenants can submit property requests"}


def test_landlord_sees_request_with_counts(client, auth, landlord, other_landlord, new_property_request):
     body = client.get("/api/property-requests", headers=auth(landlord)).json()
     assert body["total"] == 1
     assert body["status_counts"]["pending"] == 1

     assert client.get("/api/property-requests", headers=auth(other_landlord)).json()["total"] == 0
     response = client.get(f"/api/property-requests/{new_property_request['id']}", headers=auth(other_landlord))
     assert response.status_code == 403


def test_approve_creates_property(client, auth, db, landlord, tenant, new_property_request):
     response = client.post(
          f"/api/property-requests/{new_property_request['id']}/approve",
          json={"responseMessage": "Happy to list it", "createProperty": True, "propertyDetails": {"bathrooms": 1}},
          headers=auth(landlord),
     )

     assert response.status_code == 200
     body = response.json()
     assert body["success"] is True
     assert body["data"]["request"]["status"] == "property_created"
     assert "&property=" in body["data"]["leaseCreationUrl"]

     db.expire_all()
     notice = (
          db.query(Notification)
          .filter(Notification.recipient_id == tenant.id, Notification.type == "property_request_approved")
          .one()
     )
     assert "Happy to list it" in notice.message


def test_approve_needs_message(client, auth, landlord, new_property_request):
     response = client.post(
          f"/api/property-requests/{new_property_request['id']}/approve",
          json={},
          headers=auth(landlord),
     )
     assert response.status_code == 400
     assert response.json() == {"error": "Response message is required"}


def test_tenant_cannot_approve(client, auth, tenant, new_property_request):
     response = client.post(
          f"/api/property-requests/{new_property_request['id']}/approve",
          json={"responseMessage": "yes"},
          headers=auth(tenant),
     )
     assert response.status_code == 403


def test_reject_error_order(client, auth, landlord, other_landlord, new_property_request):
     request_id = new_property_request["id"]

     # Missing reason wins even for an unknown request
     response = client.post("/api/property-requests/999/reject", headers=auth(landlord))
     assert response.status_code == 400
     assert response.json() == {"error": "Rejection reason is required"}

     response = client.post("/api/property-requests/999/reject", json={"rejectionReason": "No"}, headers=auth(landlord))
     assert response.status_code == 404
     assert response.json() == {"error": "Property request not found"}

     response = client.post(f"/api/property-requests/{request_id}/reject", json={"rejectionReason": "No"},
                            headers=auth(other_landlord))
     assert response.status_code == 403

     response = client.post(f"/api/property-requests/{request_id}/reject",
                            json={"rejectionReason": "Not available"}, headers=auth(landlord))
     assert response.status_code == 200
     data = response.json()["data"]
     assert data["status"] == "rejected"
     assert data["rejectionReason"] == "Not available"
     assert data["respondedAt"]

     response = client.post(f"/api/property-requests/{request_id}/reject", json={"rejectionReason": "Again"},
                            headers=auth(landlord))
     assert response.status_code == 400
     assert response.json() == {"error": "Request has already been responded to"}


@pytest.mark.parametrize("role", ["tenant", "manager", "admin"])
def test_only_landlords_reject(client, auth, make_user, new_property_request, role):
     user = make_user(role, email=f"{role}-reject@example.com")

     for body in (None, {"rejectionReason": "No"}):
          response = client.post(f"/api/property-requests/{new_property_request['id']}/reject", json=body,
                                 headers=auth(user))
          assert response.status_code == 403
          assert response.json() == {"error": "Only landlords can reject property requests"}
