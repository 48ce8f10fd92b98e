"""
Retailer and location API tests.
"""


class TestRetailers:

    def test_owner_lists_retailers(self, client, owner_headers, retailer_a, retailer_b):
        resp = client.get("/api/retailers", headers=owner_headers)
        assert resp.status_code == 200
        assert [r["name"] for r in resp.json] == ["GadgetZone", "TechHub Electronics"]

    def test_backoffice_lists_retailers(self, client, backoffice_headers, retailer_a):
        resp = client.get("/api/retailers", headers=backoffice_headers)
        assert resp.status_code == 200

    def test_retailer_cannot_list_retailers(self, client, retailer_headers):
        resp = client.get("/api/retailers", headers=retailer_headers)
        assert resp.status_code == 403
        assert resp.json["required_capability"] == "can_see_retailers"

    def test_create_retailer(self, client, owner_headers):
        resp = client.post(
            "/api/retailers", json={"name": "Relax World", "website": "https://relax.example"},
            headers=owner_headers,
        )
        assert resp.status_code == 201
        assert resp.json["name"] == "Relax World"
        assert len(resp.json["id"]) == 36

    def test_duplicate_retailer_name(self, client, owner_headers, retailer_a):
        resp = client.post("/api/retailers", json={"name": retailer_a.name}, headers=owner_headers)
        assert resp.status_code == 409

    def test_create_retailer_requires_name(self, client, owner_headers):
        resp = client.post("/api/retailers", json={"website": "x"}, headers=owner_headers)
        assert resp.status_code == 400

    def test_location_user_cannot_create_retailer(self, client, location_headers):
        resp = client.post("/api/retailers", json={"name": "Nope"}, headers=location_headers)
        assert resp.status_code == 403


class TestLocations:

    def test_owner_sees_all_locations(self, client, owner_headers, retailer_a, location_a1, location_a2):
        resp = client.get(f"/api/retailers/{retailer_a.id}/locations", headers=owner_headers)
        assert resp.status_code == 200
        assert [loc["name"] for loc in resp.json] == ["Downtown", "Mall Kiosk"]

    def test_retailer_sees_own_locations(self, client, retailer_headers, retailer_a, location_a1, location_a2):
        resp = client.get(f"/api/retailers/{retailer_a.id}/locations", headers=retailer_headers)
        assert resp.status_code == 200
        assert len(resp.json) == 2

    def test_retailer_cannot_see_other_retailer(self, client, retailer_headers, retailer_b, location_b1):
        resp = client.get(f"/api/retailers/{retailer_b.id}/locations", headers=retailer_headers)
        assert resp.status_code == 404

    def test_location_user_sees_only_own_location(self, client, location_headers, retailer_a, location_a1, location_a2):
        resp = client.get(f"/api/retailers/{retailer_a.id}/locations", headers=location_headers)
        assert resp.status_code == 200
        assert [loc["id"] for loc in resp.json] == [location_a1.id]

    def test_location_user_other_retailer(self, client, location_headers, retailer_b):
        resp = client.get(f"/api/retailers/{retailer_b.id}/locations", headers=location_headers)
        assert resp.status_code == 404

    def test_unknown_retailer(self, client, owner_headers):
        resp = client.get("/api/retailers/nope/locations", headers=owner_headers)
        assert resp.status_code == 404

    def test_create_location(self, client, owner_headers, retailer_b):
        resp = client.post(
            f"/api/retailers/{retailer_b.id}/locations",
            json={"name": "Harbor", "address": {"line1": "4 Dock Rd", "city": "Seattle"}, "phone": "555-0100"},
            headers=owner_headers,
        )
        assert resp.status_code == 201
        assert resp.json["address"]["city"] == "Seattle"
        assert resp.json["timezone"] == "UTC"

    def test_duplicate_location_name(self, client, owner_headers, retailer_a, location_a1):
        resp = client.post(
            f"/api/retailers/{retailer_a.id}/locations", json={"name": "Downtown"}, headers=owner_headers
        )
        assert resp.status_code == 409

    def test_same_location_name_other_retailer(self, client, owner_headers, retailer_b, location_a1):
        resp = client.post(
            f"/api/retailers/{retailer_b.id}/locations", json={"name": "Downtown"}, headers=owner_headers
        )
        assert resp.status_code == 201

    def test_retailer_cannot_create_location(self, client, retailer_headers, retailer_a):
        resp = client.post(
            f"/api/retailers/{retailer_a.id}/locations", json={"name": "Annex"}, headers=retailer_headers
        )
        assert resp.status_code == 403
