from decimal import Decimal


PROPERTY = {
     "address": "4 Leopards Hill Road, Lusaka",
     "property_type": "Apartment",
     "monthly_rent": "3500.00",
     "bedrooms": 2,
     "bathrooms": 1,
     "description": "Second floor flat near the mall",
}


def test_landlord_adds_property(client, auth, landlord):
     response = client.post("/api/properties", json=PROPERTY, headers=auth(landlord))

     assert response.status_code == 201
     body = response.json()
     assert body["landlord_id"] == landlord.id
     assert body["landlord_name"] == landlord.name
     assert Decimal(str(body["monthly_rent"])) == Decimal("3500.00")
     assert body["is_available"] is True


def test_tenant_cannot_add_property(client, auth, tenant):
     response = client.post("/api/properties", json=PROPERTY, headers=auth(tenant))

     assert response.status_code == 403
     assert response.json() == {"error": "Only landlords can add properties"}


def test_unknown_property_type_rejected(client, auth, landlord):
     response = client.post("/api/properties", json={**PROPERTY, "property_type": "Castle"}, headers=auth(landlord))

     assert response.status_code == 422


def test_listing_is_scoped_by_role(client, auth, landlord, other_landlord, tenant, prop):
     client.post("/api/properties", json={**PROPERTY, "is_available": False}, headers=auth(other_landlord))

     assert client.get("/api/properties", headers=auth(landlord)).json()["total"] == 1
     assert client.get("/api/properties", headers=auth(other_landlord)).json()["total"] == 1

     tenant_view = client.get("/api/properties", headers=auth(tenant)).json()
     assert tenant_view["total"] == 1
     assert tenant_view["properties"][0]["id"] == prop.id


def test_list_filters(client, auth, landlord, prop):
     client.post("/api/properties", json=PROPERTY, headers=auth(landlord))

     cheap = client.get("/api/properties", params={"max_rent": 4000}, headers=auth(landlord)).json()
     houses = client.get("/api/properties", params={"property_type": "House"}, headers=auth(landlord)).json()

     assert [p["address"] for p in cheap["properties"]] == [PROPERTY["address"]]
     assert [p["id"] for p in houses["properties"]] == [prop.id]


def test_search(client, auth, landlord, prop):
     client.post("/api/properties", json=PROPERTY, headers=auth(landlord))

     response = client.get("/api/properties/search", params={"q": "kabulonga"}, headers=auth(landlord))

     assert response.status_code == 200
     assert [p["id"] for p in response.json()] == [prop.id]


def test_update_property(client, auth, landlord, other_landlord, prop):
     response = client.put(f"/api/properties/{prop.id}", json={"monthly_rent": "5500.00", "is_available": False},
                           headers=auth(landlord))

     assert response.status_code == 200
     assert Decimal(str(response.json()["monthly_rent"])) == Decimal("5500.00")
     assert response.json()["is_available"] is False

     response = client.put(f"/api/properties/{prop.id}", json={"bedrooms": 9}, headers=auth(other_landlord))
     assert response.status_code == 403
     assert response.json() == {"error": "You can only manage your own properties"}


def test_get_missing_property(client, auth, landlord):
     response = client.get("/api/properties/999", headers=auth(landlord))

     assert response.status_code == 404
     assert response.json() == {"error": "Property not found"}


def test_delete_blocked_by_active_lease(client, auth, landlord, prop, active_lease):
     response = client.delete(f"/api/properties/{prop.id}", headers=auth(landlord))

     assert response.status_code == 400
     assert response.json() == {"error": "Cannot delete a property with an active lease"}


def test_delete_property(client, auth, landlord, prop):
     response = client.delete(f"/api/properties/{prop.id}", headers=auth(landlord))

     assert response.status_code == 204
     assert client.get(f"/api/properties/{prop.id}", headers=auth(landlord)).status_code == 404
