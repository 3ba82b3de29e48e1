"""Integration tests for the HTTP API."""

from fastapi.testclient import TestClient


def _create_order(client: TestClient, customer, products, **extra) -> dict:
    pen, pad = products
    payload = {
        "customer_id": customer.id,
        "items": [
            {"product_id": pen.id, "quantity": 2},
            {"product_id": pad.id, "quantity": 3},
        ],
    }
    payload.update(extra)
    response = client.post("/api/v1/orders", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"


class TestOrderEndpoints:

    def test_create_order_totals(self, client, customer, products):
        body = _create_order(client, customer, products, tax_amount="3.65", discount_amount="5.00")

        assert body["status"] == "pending"
        assert body["subtotal"] == "36.50"
        assert body["total_amount"] == "35.15"
        assert body["total_items"] == 5
        assert body["can_be_cancelled"] is True
        assert [line["line_total"] for line in body["line_items"]] == ["20.00", "16.50"]

    def test_create_order_unknown_customer(self, client, products):
        response = client.post("/api/v1/orders", json={"customer_id": 999, "items": []})
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_create_order_unknown_product(self, client, customer):
        response = client.post(
            "/api/v1/orders",
            json={"customer_id": customer.id, "items": [{"product_id": 404, "quantity": 1}]},
        )
        assert response.status_code == 404

    def test_get_and_list(self, client, customer, products):
        created = _create_order(client, customer, products)

        response = client.get(f"/api/v1/orders/{created['order_id']}")
        assert response.status_code == 200
        assert response.json()["subtotal"] == "36.50"

        listing = client.get("/api/v1/orders", params={"customer_id": customer.id}).json()
        assert listing["total"] == 1

        by_customer = client.get(f"/api/v1/orders/customer/{customer.id}").json()
        assert by_customer["orders"][0]["order_id"] == created["order_id"]

    def test_get_missing_order(self, client):
        assert client.get("/api/v1/orders/12345").status_code == 404

    def test_orders_by_date_range(self, client, customer, products):
        created = _create_order(client, customer, products)

        response = client.get("/api/v1/orders/date-range",
                              params={"start": "2000-01-01T00:00:00", "end": "2100-01-01T00:00:00"})
        assert response.status_code == 200
        assert [o["order_id"] for o in response.json()] == [created["order_id"]]

        empty = client.get("/api/v1/orders/date-range",
                           params={"start": "1990-01-01T00:00:00", "end": "1991-01-01T00:00:00"})
        assert empty.json() == []

        backwards = client.get("/api/v1/orders/date-range",
                               params={"start": "2100-01-01T00:00:00", "end": "2000-01-01T00:00:00"})
        assert backwards.status_code == 400

    def test_status_update(self, client, customer, products):
        order = _create_order(client, customer, products)
        response = client.patch(f"/api/v1/orders/{order['order_id']}/status", json={"status": "delivered"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "delivered"
        assert body["is_completed"] is True
        assert body["subtotal"] == "36.50"

        assert client.patch("/api/v1/orders/999/status", json={"status": "shipped"}).status_code == 404

    def test_add_update_remove_items(self, client, customer, products):
        pen, _ = products
        order = _create_order(client, customer, products)
        order_id = order["order_id"]

        order = client.post(f"/api/v1/orders/{order_id}/items",
                            json={"product_id": pen.id, "quantity": 1}).json()
        assert len(order["line_items"]) == 3
        assert order["subtotal"] == "46.50"

        first_id = order["line_items"][0]["line_item_id"]
        order = client.patch(f"/api/v1/orders/{order_id}/items/{first_id}", json={"quantity": 4}).json()
        assert order["subtotal"] == "66.50"

        order = client.patch(f"/api/v1/orders/{order_id}/items/{first_id}", json={"delta": -1}).json()
        assert order["line_items"][0]["quantity"] == 3

        response = client.delete(f"/api/v1/orders/{order_id}/items/{first_id}")
        assert response.status_code == 200
        assert response.json()["subtotal"] == "26.50"

    def test_invalid_quantity_rejected(self, client, customer, products):
        order = _create_order(client, customer, products)
        item_id = order["line_items"][0]["line_item_id"]

        response = client.patch(f"/api/v1/orders/{order['order_id']}/items/{item_id}", json={"quantity": 0})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_QUANTITY"

        response = client.patch(f"/api/v1/orders/{order['order_id']}/items/{item_id}", json={"delta": -2})
        assert response.status_code == 400

        unchanged = client.get(f"/api/v1/orders/{order['order_id']}").json()
        assert unchanged["line_items"][0]["quantity"] == 2

    def test_adjustments(self, client, customer, products):
        order = _create_order(client, customer, products)
        response = client.patch(
            f"/api/v1/orders/{order['order_id']}/adjustments",
            json={"tax_amount": "3.65", "discount_amount": "5.00", "notes": "loyalty discount"},
        )
        body = response.json()
        assert body["total_amount"] == "35.15"
        assert body["notes"] == "loyalty discount"

    def test_cancel_pending(self, client, customer, products):
        order = _create_order(client, customer, products)
        response = client.post(f"/api/v1/orders/{order['order_id']}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_cancel_shipped_conflicts(self, client, customer, products):
        order = _create_order(client, customer, products)
        client.patch(f"/api/v1/orders/{order['order_id']}/status", json={"status": "shipped"})

        response = client.post(f"/api/v1/orders/{order['order_id']}/cancel")
        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "INVALID_STATE_TRANSITION"
        assert body["details"]["current_status"] == "shipped"

        assert client.get(f"/api/v1/orders/{order['order_id']}").json()["status"] == "shipped"

    def test_delete_order(self, client, customer, products):
        order = _create_order(client, customer, products)
        assert client.delete(f"/api/v1/orders/{order['order_id']}").status_code == 204
        assert client.get(f"/api/v1/orders/{order['order_id']}").status_code == 404
        assert client.delete(f"/api/v1/orders/{order['order_id']}").status_code == 404

    def test_summary(self, client, customer, products):
        _create_order(client, customer, products)
        cancelled = _create_order(client, customer, products)
        client.post(f"/api/v1/orders/{cancelled['order_id']}/cancel")

        summary = client.get("/api/v1/orders/summary").json()
        assert summary["total_orders"] == 2
        assert summary["total_products"] == 2
        assert summary["total_customers"] == 1
        assert summary["total_revenue"] == "36.50"
        assert summary["orders_by_status"] == {"pending": 1, "cancelled": 1}


class TestCatalogEndpoints:

    def test_product_crud(self, client):
        created = client.post("/api/v1/products", json={"name": "Lamp", "sku": "LMP-1", "price": "25.00"})
        assert created.status_code == 201
        product_id = created.json()["id"]

        duplicate = client.post("/api/v1/products", json={"name": "Lamp 2", "sku": "LMP-1", "price": "1.00"})
        assert duplicate.status_code == 400

        updated = client.put(f"/api/v1/products/{product_id}", json={"price": "27.50"})
        assert updated.json()["price"] == "27.50"

        assert client.delete(f"/api/v1/products/{product_id}").status_code == 204
        assert client.get(f"/api/v1/products/{product_id}").json()["is_active"] is False

    def test_stock_adjustment(self, client, products):
        pen, _ = products
        response = client.post(f"/api/v1/products/{pen.id}/stock", json={"change": -10})
        assert response.json()["stock_quantity"] == 40

        response = client.post(f"/api/v1/products/{pen.id}/stock", json={"change": -100})
        assert response.status_code == 400

    def test_customer_and_category(self, client):
        customer = client.post("/api/v1/customers",
                               json={"first_name": "Grace", "last_name": "Hopper", "email": "grace@example.com"})
        assert customer.status_code == 201
        assert customer.json()["full_name"] == "Grace Hopper"

        again = client.post("/api/v1/customers",
                            json={"first_name": "G", "last_name": "H", "email": "grace@example.com"})
        assert again.status_code == 400

        category = client.post("/api/v1/categories", json={"name": "Lighting"})
        assert category.status_code == 201
        assert [c["name"] for c in client.get("/api/v1/categories").json()] == ["Lighting"]

    def test_inactive_product_cannot_be_ordered(self, client, customer, products):
        pen, _ = products
        client.delete(f"/api/v1/products/{pen.id}")
        response = client.post(
            "/api/v1/orders",
            json={"customer_id": customer.id, "items": [{"product_id": pen.id, "quantity": 1}]},
        )
        assert response.status_code == 400


class TestPaymentEndpoints:

    def test_payment_lifecycle(self, client, customer, products):
        order = _create_order(client, customer, products)
        payment = client.post("/api/v1/payments", json={
            "order_id": order["order_id"],
            "payment_method": "credit_card",
            "amount": "36.50",
        }).json()
        assert payment["status"] == "pending"

        refund = client.post(f"/api/v1/payments/{payment['id']}/refund", json={"amount": "10.00"})
        assert refund.status_code == 409

        completed = client.post(f"/api/v1/payments/{payment['id']}/complete", json={"transaction_id": "TX-9"})
        assert completed.json()["status"] == "completed"

        too_much = client.post(f"/api/v1/payments/{payment['id']}/refund", json={"amount": "40.00"})
        assert too_much.status_code == 400
        assert too_much.json()["error_code"] == "INVALID_REFUND_AMOUNT"

        partial = client.post(f"/api/v1/payments/{payment['id']}/refund", json={"amount": "10.00"})
        assert partial.json()["status"] == "partial_refund"

        payments = client.get(f"/api/v1/orders/{order['order_id']}/payments").json()
        assert len(payments) == 1

    def test_payment_for_missing_order(self, client):
        response = client.post("/api/v1/payments", json={
            "order_id": 77, "payment_method": "cash", "amount": "1.00",
        })
        assert response.status_code == 404
