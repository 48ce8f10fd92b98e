"""
Customer API tests.

Verifies:
- Customers are pinned to the creator's retailer / location
- Location users only see customers whose primary location is theirs
- Reads and updates outside the actor's scope look like missing customers
- Email is unique per retailer
"""

from nexus.extensions import db
from nexus.models import Customer


def create(client, headers, **fields):
    payload = {"name": "Casey Morgan"}
    payload.update(fields)
    resp = client.post("/api/customers", json=payload, headers=headers)
    assert resp.status_code == 201, resp.json
    return resp.json


class TestCreateCustomer:

    def test_requires_auth(self, client):
        resp = client.post("/api/customers", json={"name": "Casey Morgan"})
        assert resp.status_code == 401

    def test_location_user_customer_pinned_to_location(
        self, client, location_headers, location_user, location_a1, retailer_a,
    ):
        body = create(client, location_headers, email="Casey@Example.com ")
        assert body["primary_location_id"] == location_a1.id
        assert body["retailer_id"] == retailer_a.id
        assert body["created_by"] == location_user.id
        assert body["email"] == "casey@example.com"
        assert body["version_id"] == 1
        assert body["created_at"].endswith("Z")

    def test_retailer_customer_pinned_to_retailer(self, client, retailer_headers, retailer_a):
        body = create(client, retailer_headers)
        assert body["retailer_id"] == retailer_a.id
        assert body["primary_location_id"] is None

    def test_retailer_cannot_create_for_other_retailer(self, client, retailer_headers, retailer_b):
        resp = client.post(
            "/api/customers", json={"name": "X", "retailer_id": retailer_b.id}, headers=retailer_headers
        )
        assert resp.status_code == 403
        assert resp.json["error"] == "Access denied"

    def test_location_user_cannot_create_for_other_location(self, client, location_headers, location_a2):
        resp = client.post(
            "/api/customers", json={"name": "X", "primary_location_id": location_a2.id}, headers=location_headers
        )
        assert resp.status_code == 403

    def test_owner_needs_a_retailer(self, client, owner_headers):
        resp = client.post("/api/customers", json={"name": "X"}, headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["errors"] == ["retailer_id is required"]

    def test_owner_location_sets_retailer(self, client, owner_headers, location_b1, retailer_b):
        body = create(client, owner_headers, primary_location_id=location_b1.id)
        assert body["retailer_id"] == retailer_b.id

    def test_location_of_other_retailer_rejected(self, client, retailer_headers, location_b1):
        resp = client.post(
            "/api/customers", json={"name": "X", "primary_location_id": location_b1.id}, headers=retailer_headers
        )
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Location does not belong to this retailer"]

    def test_name_required(self, client, retailer_headers):
        resp = client.post("/api/customers", json={"email": "a@b.test"}, headers=retailer_headers)
        assert resp.status_code == 400
        resp = client.post("/api/customers", json={"name": "  "}, headers=retailer_headers)
        assert resp.status_code == 400

    def test_bad_email(self, client, retailer_headers):
        resp = client.post("/api/customers", json={"name": "X", "email": "nobody"}, headers=retailer_headers)
        assert resp.status_code == 400

    def test_address_normalized(self, client, retailer_headers):
        body = create(client, retailer_headers, default_address={"street": "9 Elm St", "zip": "78701"})
        assert body["default_address"]["line1"] == "9 Elm St"
        assert body["default_address"]["postal_code"] == "78701"

    def test_duplicate_email_per_retailer(self, client, retailer_headers, other_retailer_headers, downtown_customer):
        resp = client.post(
            "/api/customers", json={"name": "X", "email": "AVERY@example.com"}, headers=retailer_headers
        )
        assert resp.status_code == 409
        create(client, other_retailer_headers, email="avery@example.com")


class TestReadCustomers:

    def test_list_scoped_per_role(
        self, client, owner_headers, retailer_headers, other_retailer_headers,
        location_headers, mall_headers, downtown_customer, gadget_customer,
    ):
        retailer_wide = create(client, retailer_headers)["id"]

        def ids(headers):
            resp = client.get("/api/customers", headers=headers)
            assert resp.status_code == 200
            return {customer["id"] for customer in resp.json["customers"]}

        assert ids(owner_headers) == {downtown_customer.id, gadget_customer.id, retailer_wide}
        assert ids(retailer_headers) == {downtown_customer.id, retailer_wide}
        assert ids(other_retailer_headers) == {gadget_customer.id}
        assert ids(location_headers) == {downtown_customer.id}
        assert ids(mall_headers) == set()

    def test_search_and_order(self, client, retailer_headers, downtown_customer):
        create(client, retailer_headers, name="Aaron Blake", phone="512-555-0100")

        resp = client.get("/api/customers", headers=retailer_headers)
        assert [c["name"] for c in resp.json["customers"]] == ["Aaron Blake", "Avery Stone"]

        resp = client.get("/api/customers?search=avery@", headers=retailer_headers)
        assert [c["id"] for c in resp.json["customers"]] == [downtown_customer.id]

        resp = client.get("/api/customers?search=555-0100&limit=1", headers=retailer_headers)
        assert resp.json["count"] == 1

    def test_bad_limit(self, client, owner_headers):
        assert client.get("/api/customers?limit=0", headers=owner_headers).status_code == 400

    def test_get_out_of_scope_is_404(
        self, client, location_headers, mall_headers, other_retailer_headers, downtown_customer,
    ):
        path = f"/api/customers/{downtown_customer.id}"
        resp = client.get(path, headers=location_headers)
        assert resp.status_code == 200
        assert resp.json["name"] == "Avery Stone"
        assert client.get(path, headers=mall_headers).status_code == 404
        assert client.get(path, headers=other_retailer_headers).status_code == 404

    def test_get_missing(self, client, owner_headers):
        assert client.get("/api/customers/missing", headers=owner_headers).status_code == 404


class TestUpdateCustomer:

    def test_update_fields(self, client, location_headers, downtown_customer):
        resp = client.patch(
            f"/api/customers/{downtown_customer.id}",
            json={"phone": "512-555-0199", "notes": "Prefers mornings"},
            headers=location_headers,
        )
        assert resp.status_code == 200
        assert resp.json["phone"] == "512-555-0199"
        assert resp.json["name"] == "Avery Stone"
        db.session.expire_all()
        assert db.session.get(Customer, downtown_customer.id).version_id == 2

    def test_retailer_cannot_change(self, client, owner_headers, downtown_customer, retailer_b):
        resp = client.patch(
            f"/api/customers/{downtown_customer.id}", json={"retailer_id": retailer_b.id}, headers=owner_headers
        )
        assert resp.status_code == 400

    def test_unknown_field(self, client, owner_headers, downtown_customer):
        resp = client.patch(f"/api/customers/{downtown_customer.id}", json={"vip": True}, headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Unknown fields: vip"]

    def test_location_user_cannot_move_customer(self, client, location_headers, downtown_customer, location_a2):
        resp = client.patch(
            f"/api/customers/{downtown_customer.id}",
            json={"primary_location_id": location_a2.id},
            headers=location_headers,
        )
        assert resp.status_code == 403

    def test_retailer_moves_customer_within_retailer(
        self, client, retailer_headers, downtown_customer, location_a2, location_b1,
    ):
        path = f"/api/customers/{downtown_customer.id}"
        resp = client.patch(path, json={"primary_location_id": location_b1.id}, headers=retailer_headers)
        assert resp.status_code == 400

        resp = client.patch(path, json={"primary_location_id": location_a2.id}, headers=retailer_headers)
        assert resp.status_code == 200
        assert resp.json["primary_location_id"] == location_a2.id

    def test_out_of_scope_update_is_404(self, client, mall_headers, downtown_customer):
        resp = client.patch(f"/api/customers/{downtown_customer.id}", json={"name": "X"}, headers=mall_headers)
        assert resp.status_code == 404

    def test_duplicate_email_on_update(self, client, retailer_headers, downtown_customer):
        other = create(client, retailer_headers, email="casey@example.com")
        resp = client.patch(
            f"/api/customers/{other['id']}", json={"email": "avery@example.com"}, headers=retailer_headers
        )
        assert resp.status_code == 409
