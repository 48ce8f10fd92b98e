"""
Order API tests.

Verifies:
- Capability gating (backoffice cannot create, everyone else can)
- Orders are pinned to the creator's retailer / location
- Reads and updates outside the actor's scope look like missing orders
- Validation errors carry every message
- Referenced customers must be visible and belong to the order's retailer
"""

import pytest
from sqlalchemy.exc import IntegrityError

from nexus.extensions import db
from nexus.models import Order
from nexus.services import order_service
from nexus.services.access_service import actor_from_user


def new_order_payload(**overrides):
    payload = {
        "items": [{"product_variant_id": "var-relax-chair", "quantity": 1, "unit_price": "2499.00"}],
        "total_amount": "2499.00",
        "shipping_address": {"line1": "1 Main St", "city": "Austin", "state": "TX"},
    }
    payload.update(overrides)
    return payload


def create(client, headers, **overrides):
    resp = client.post("/api/orders", json=new_order_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.json
    return resp.json


class TestCreateOrder:

    def test_requires_auth(self, client):
        resp = client.post("/api/orders", json=new_order_payload())
        assert resp.status_code == 401
        assert resp.json["redirect"] == "/auth/login"

    def test_backoffice_cannot_create(self, client, backoffice_headers):
        resp = client.post("/api/orders", json=new_order_payload(), headers=backoffice_headers)
        assert resp.status_code == 403
        assert resp.json == {"error": "Access denied", "required_capability": "can_create_orders"}

    def test_location_user_order_pinned_to_location(self, client, location_headers, location_user, location_a1, retailer_a):
        body = create(client, location_headers)
        assert body["location_id"] == location_a1.id
        assert body["retailer_id"] == retailer_a.id
        assert body["created_by"] == location_user.id
        assert body["status"] == "pending"
        assert body["id"].startswith("order-")
        assert body["total_amount"] == "2499.00"
        assert body["items"][0]["quantity"] == 1

    def test_retailer_order_pinned_to_retailer(self, client, retailer_headers, retailer_a):
        body = create(client, retailer_headers)
        assert body["retailer_id"] == retailer_a.id
        assert body["location_id"] is None

    def test_retailer_cannot_create_for_other_retailer(self, client, retailer_headers, retailer_b):
        resp = client.post(
            "/api/orders", json=new_order_payload(retailer_id=retailer_b.id), headers=retailer_headers
        )
        assert resp.status_code == 403

    def test_location_user_cannot_create_for_other_location(self, client, location_headers, location_a2):
        resp = client.post(
            "/api/orders", json=new_order_payload(location_id=location_a2.id), headers=location_headers
        )
        assert resp.status_code == 403

    def test_owner_order_without_retailer_gets_placeholder(self, client, owner_headers, app):
        body = create(client, owner_headers)
        assert body["retailer_id"] == app.config["DEFAULT_RETAILER_ID"]

    def test_owner_location_sets_retailer(self, client, owner_headers, location_b1, retailer_b):
        body = create(client, owner_headers, location_id=location_b1.id)
        assert body["retailer_id"] == retailer_b.id

    def test_unknown_location_rejected(self, client, owner_headers):
        resp = client.post("/api/orders", json=new_order_payload(location_id="nope"), headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Location not found"]

    def test_client_cannot_set_creator(self, client, retailer_headers, retailer_user):
        body = create(client, retailer_headers, created_by="someone-else")
        assert body["created_by"] == retailer_user.id

    def test_bad_payload(self, client, retailer_headers):
        resp = client.post(
            "/api/orders",
            json=new_order_payload(items=[{"product_variant_id": "v", "quantity": 0, "unit_price": 1}]),
            headers=retailer_headers,
        )
        assert resp.status_code == 400
        assert resp.json["error"] == "Validation failed"
        assert resp.json["errors"]

    def test_non_object_body(self, client, retailer_headers):
        resp = client.post("/api/orders", json=[1, 2], headers=retailer_headers)
        assert resp.status_code == 400

    def test_duplicate_client_id(self, client, retailer_headers):
        create(client, retailer_headers, id="order-fixed")
        resp = client.post("/api/orders", json=new_order_payload(id="order-fixed"), headers=retailer_headers)
        assert resp.status_code == 409

    @pytest.mark.parametrize("blank_id", [None, "", "   "])
    def test_blank_client_id_gets_generated(self, client, retailer_headers, blank_id):
        body = create(client, retailer_headers, id=blank_id)
        assert body["id"].startswith("order-")
        assert db.session.get(Order, body["id"]) is not None

    def test_integrity_error_other_than_id_collision_propagates(self, app, owner, monkeypatch):
        monkeypatch.setattr(order_service, "_default_retailer_id", lambda: None)
        with pytest.raises(IntegrityError):
            order_service.create_order(actor_from_user(owner), new_order_payload())
        assert db.session.query(Order).count() == 0

    def test_row_stored_in_current_shape(self, client, retailer_headers, app):
        body = create(client, retailer_headers)
        row = db.session.get(Order, body["id"])
        assert isinstance(row.items, str)
        assert row.metadata_json == "{}"
        assert row.created_at.endswith("Z")


class TestReadOrders:

    def test_list_scoped_per_role(
        self, client, owner_headers, retailer_headers, other_retailer_headers,
        location_headers, mall_headers, location_a2,
    ):
        downtown = create(client, location_headers)["id"]
        mall = create(client, mall_headers)["id"]
        retailer_wide = create(client, retailer_headers)["id"]
        other = create(client, other_retailer_headers)["id"]

        def ids(headers):
            resp = client.get("/api/orders", headers=headers)
            assert resp.status_code == 200
            return {order["id"] for order in resp.json["orders"]}

        assert ids(owner_headers) == {downtown, mall, retailer_wide, other}
        assert ids(retailer_headers) == {downtown, mall, retailer_wide}
        assert ids(other_retailer_headers) == {other}
        assert ids(location_headers) == {downtown}
        assert ids(mall_headers) == {mall}

    def test_list_newest_first_and_status_filter(self, client, owner_headers, retailer_headers):
        first = create(client, retailer_headers)["id"]
        second = create(client, retailer_headers, status="processing")["id"]

        resp = client.get("/api/orders", headers=owner_headers)
        assert [o["id"] for o in resp.json["orders"]] == [second, first]

        resp = client.get("/api/orders?status=processing", headers=owner_headers)
        assert [o["id"] for o in resp.json["orders"]] == [second]

    def test_unknown_status_filter(self, client, owner_headers):
        resp = client.get("/api/orders?status=lost", headers=owner_headers)
        assert resp.status_code == 400

    def test_bad_limit(self, client, owner_headers):
        resp = client.get("/api/orders?limit=abc", headers=owner_headers)
        assert resp.status_code == 400

    def test_get_out_of_scope_is_404(self, client, location_headers, mall_headers, other_retailer_headers):
        order_id = create(client, location_headers)["id"]
        assert client.get(f"/api/orders/{order_id}", headers=location_headers).status_code == 200
        assert client.get(f"/api/orders/{order_id}", headers=mall_headers).status_code == 404
        assert client.get(f"/api/orders/{order_id}", headers=other_retailer_headers).status_code == 404

    def test_get_missing(self, client, owner_headers):
        assert client.get("/api/orders/order-missing", headers=owner_headers).status_code == 404

    def test_corrupt_row_still_readable(self, client, owner_headers, retailer_headers):
        order_id = create(client, retailer_headers)["id"]
        row = db.session.get(Order, order_id)
        row.items = "[{broken"
        db.session.commit()

        resp = client.get(f"/api/orders/{order_id}", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json["items"] == []
        assert resp.json["shipping_address"]["city"] == "Austin"

    def test_recent_orders_from_store(self, client, order_store, retailer_headers, location_headers, mall_headers):
        mine = create(client, location_headers)["id"]
        create(client, mall_headers)
        assert order_store.count() == 2

        resp = client.get("/api/orders/recent", headers=location_headers)
        assert resp.status_code == 200
        assert [o["id"] for o in resp.json["orders"]] == [mine]

        resp = client.get("/api/orders/recent?limit=1", headers=retailer_headers)
        assert resp.json["count"] == 1


class TestUpdateOrder:

    def test_update_status(self, client, retailer_headers, backoffice_headers, order_store):
        order_id = create(client, retailer_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}", json={"status": "shipped"}, headers=backoffice_headers)
        assert resp.status_code == 200
        assert resp.json["status"] == "shipped"
        assert order_store.get_by_id(order_id).status.value == "shipped"

    def test_update_keeps_creator_and_created_at(
        self, client, retailer_headers, retailer_user, owner_headers, downtown_customer,
    ):
        created = create(client, retailer_headers)
        resp = client.patch(
            f"/api/orders/{created['id']}",
            json={"customer_id": downtown_customer.id, "created_by": "intruder"},
            headers=owner_headers,
        )
        assert resp.status_code == 200
        assert resp.json["created_by"] == retailer_user.id
        assert resp.json["created_at"] == created["created_at"]
        assert resp.json["customer_id"] == downtown_customer.id

    def test_out_of_scope_update_is_404(self, client, location_headers, mall_headers):
        order_id = create(client, location_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}", json={"status": "cancelled"}, headers=mall_headers)
        assert resp.status_code == 404

    def test_bounded_actor_cannot_move_order(self, client, retailer_headers, retailer_b):
        order_id = create(client, retailer_headers)["id"]
        resp = client.patch(
            f"/api/orders/{order_id}", json={"retailer_id": retailer_b.id}, headers=retailer_headers
        )
        assert resp.status_code == 403

    def test_clearing_status_fails_validation(self, client, retailer_headers):
        order_id = create(client, retailer_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}", json={"status": None}, headers=retailer_headers)
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Order status is required"]

    def test_id_cannot_change(self, client, retailer_headers):
        order_id = create(client, retailer_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}", json={"id": "order-other"}, headers=retailer_headers)
        assert resp.status_code == 400

    def test_version_increments(self, client, retailer_headers):
        order_id = create(client, retailer_headers)["id"]
        client.patch(f"/api/orders/{order_id}", json={"status": "processing"}, headers=retailer_headers)
        db.session.expire_all()
        assert db.session.get(Order, order_id).version_id == 2



class TestOrderCustomer:

    def test_order_with_customer(self, client, location_headers, downtown_customer):
        body = create(client, location_headers, customer_id=downtown_customer.id)
        assert body["customer_id"] == downtown_customer.id

    def test_owner_order_inherits_customer_retailer(self, client, owner_headers, gadget_customer, retailer_b):
        body = create(client, owner_headers, customer_id=gadget_customer.id)
        assert body["retailer_id"] == retailer_b.id

    def test_customer_of_other_retailer_rejected(self, client, retailer_headers, gadget_customer):
        resp = client.post(
            "/api/orders", json=new_order_payload(customer_id=gadget_customer.id), headers=retailer_headers
        )
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Customer not found"]

    def test_owner_cannot_mix_retailer_and_customer(self, client, owner_headers, retailer_a, gadget_customer):
        resp = client.post(
            "/api/orders",
            json=new_order_payload(retailer_id=retailer_a.id, customer_id=gadget_customer.id),
            headers=owner_headers,
        )
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Customer does not belong to this retailer"]

    def test_customer_outside_location_rejected(self, client, mall_headers, downtown_customer):
        resp = client.post(
            "/api/orders", json=new_order_payload(customer_id=downtown_customer.id), headers=mall_headers
        )
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Customer not found"]

    def test_unknown_customer_on_update(self, client, retailer_headers):
        order_id = create(client, retailer_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}", json={"customer_id": "nope"}, headers=retailer_headers)
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Customer not found"]

    def test_moving_order_away_from_its_customer_rejected(
        self, client, owner_headers, downtown_customer, retailer_b,
    ):
        order_id = create(client, owner_headers, customer_id=downtown_customer.id)["id"]
        resp = client.patch(f"/api/orders/{order_id}", json={"retailer_id": retailer_b.id}, headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["errors"] == ["Customer does not belong to this retailer"]

class TestValidateEndpoint:

    @pytest.mark.parametrize("payload,errors", [
        ({"id": "o1", "status": "pending", "total_amount": 10, "created_by": "u1"}, []),
        ({"status": "pending"}, [
            "Order ID is required",
            "Order total amount is required",
            "Order creator ID is required",
        ]),
    ])
    def test_validate(self, client, location_headers, payload, errors):
        resp = client.post("/api/orders/validate", json=payload, headers=location_headers)
        assert resp.status_code == 200
        assert resp.json == {"valid": not errors, "errors": errors}
