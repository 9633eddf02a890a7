"""Integration tests for the order endpoints via TestClient."""

from protean import current_domain

from storefront.catalogue.product.product import Product
from storefront.ordering.order.order import Order


def _place(client, headers, shipping_address, **extra):
    payload = {"shipping_address": shipping_address, "payment_method": "stripe", **extra}
    return client.post("/orders", json=payload, headers=headers)


class TestPlaceOrder:
    def test_checkout_creates_order_and_takes_stock(
        self, client, user_headers, shipping_address, make_product, add_to_cart
    ):
        product_id = make_product(price=30.0, quantity=10)
        add_to_cart("user-001", product_id, 2)

        response = _place(client, user_headers, shipping_address, customer_note="Leave at the door")

        assert response.status_code == 201
        order = current_domain.repository_for(Order).get(response.json()["order_id"])
        assert order.status == "pending"
        assert order.pricing.total == 75.95
        assert order.customer_note == "Leave at the door"
        assert current_domain.repository_for(Product).get(product_id).inventory.quantity == 8

    def test_empty_cart(self, client, user_headers, shipping_address):
        response = _place(client, user_headers, shipping_address)

        assert response.status_code == 400
        assert response.json()["message"] == "Cart is empty"

    def test_unknown_payment_method(self, client, user_headers, shipping_address, make_product, add_to_cart):
        add_to_cart("user-001", make_product(), 1)

        response = _place(client, user_headers, shipping_address, payment_method="barter")

        assert response.status_code == 400
        assert "payment_method" in response.json()["errors"]

    def test_address_needs_valid_email(self, client, user_headers, shipping_address, make_product, add_to_cart):
        add_to_cart("user-001", make_product(), 1)
        shipping_address["email"] = "not-an-email"

        response = _place(client, user_headers, shipping_address)

        assert response.status_code == 400
        assert "shipping_address.email" in response.json()["errors"]


class TestReadOrders:
    def test_users_see_only_their_orders(self, client, user_headers, admin_headers, checkout):
        mine, _ = checkout(user_id="user-001")
        checkout(user_id="user-002")

        own = client.get("/orders", headers=user_headers).json()
        everyone = client.get("/orders", headers=admin_headers).json()

        assert [order["id"] for order in own["orders"]] == [mine]
        assert own["pagination"]["total_orders"] == 1
        assert everyone["pagination"]["total_orders"] == 2

    def test_status_filter(self, client, admin_headers, checkout):
        order_id, _ = checkout(user_id="user-001")
        checkout(user_id="user-002")
        client.put(f"/orders/{order_id}/status", json={"status": "processing"}, headers=admin_headers)

        body = client.get("/orders", params={"status": "processing"}, headers=admin_headers).json()

        assert [order["id"] for order in body["orders"]] == [order_id]

    def test_detail(self, client, user_headers, checkout):
        order_id, product_id = checkout(user_id="user-001", price=40.0, quantity=2)

        order = client.get(f"/orders/{order_id}", headers=user_headers).json()["order"]

        assert order["items"][0]["product_id"] == product_id
        assert order["pricing"] == {"subtotal": 80.0, "shipping": 10.0, "tax": 7.65, "discount": 0.0, "total": 97.65}
        assert order["shipping_address"]["street"] == "12 Analytical Way"
        assert order["status_history"][0]["status"] == "pending"

    def test_other_users_order_is_not_found(self, client, other_user_headers, checkout):
        order_id, _ = checkout(user_id="user-001")

        response = client.get(f"/orders/{order_id}", headers=other_user_headers)

        assert response.status_code == 404

    def test_admin_sees_any_order(self, client, admin_headers, checkout):
        order_id, _ = checkout(user_id="user-001")

        assert client.get(f"/orders/{order_id}", headers=admin_headers).status_code == 200


class TestAdminUpdates:
    def test_status_update(self, client, admin_headers, checkout):
        order_id, _ = checkout()

        response = client.put(
            f"/orders/{order_id}/status", json={"status": "processing", "note": "Packed"}, headers=admin_headers
        )

        assert response.json() == {"status": "processing"}
        history = current_domain.repository_for(Order).get(order_id).status_history
        assert history[-1].note == "Packed"
        assert str(history[-1].changed_by) == "admin-001"

    def test_status_update_requires_admin(self, client, user_headers, checkout):
        order_id, _ = checkout()

        response = client.put(f"/orders/{order_id}/status", json={"status": "shipped"}, headers=user_headers)

        assert response.status_code == 403

    def test_invalid_status(self, client, admin_headers, checkout):
        order_id, _ = checkout()

        response = client.put(f"/orders/{order_id}/status", json={"status": "lost"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid status. Must be one of:")

    def test_tracking_ships_processing_order(self, client, admin_headers, checkout):
        order_id, _ = checkout()
        client.put(f"/orders/{order_id}/status", json={"status": "processing"}, headers=admin_headers)

        response = client.put(
            f"/orders/{order_id}/tracking",
            json={"carrier": "DHL", "tracking_number": "JD0146"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        order = client.get(f"/orders/{order_id}", headers=admin_headers).json()["order"]
        assert order["status"] == "shipped"
        assert order["tracking"]["tracking_number"] == "JD0146"


class TestCancel:
    def test_owner_cancels_with_reason(self, client, user_headers, checkout):
        order_id, _ = checkout(user_id="user-001")

        response = client.post(f"/orders/{order_id}/cancel", json={"reason": "Changed my mind"}, headers=user_headers)

        assert response.json() == {"status": "cancelled"}
        assert current_domain.repository_for(Order).get(order_id).status_history[-1].note == "Changed my mind"

    def test_cancel_without_body(self, client, user_headers, checkout):
        order_id, _ = checkout(user_id="user-001")

        assert client.post(f"/orders/{order_id}/cancel", headers=user_headers).status_code == 200

    def test_other_user_cannot_cancel(self, client, other_user_headers, checkout):
        order_id, _ = checkout(user_id="user-001")

        response = client.post(f"/orders/{order_id}/cancel", headers=other_user_headers)

        assert response.status_code == 404
        assert current_domain.repository_for(Order).get(order_id).status == "pending"

    def test_delivered_order_cannot_be_cancelled(self, client, user_headers, admin_headers, checkout):
        order_id, _ = checkout(user_id="user-001")
        client.put(f"/orders/{order_id}/status", json={"status": "delivered"}, headers=admin_headers)

        response = client.post(f"/orders/{order_id}/cancel", headers=user_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Order cannot be cancelled. Current status: delivered"


class TestAnalytics:
    def test_admin_summary(self, client, admin_headers, checkout, pay_order):
        order_id, _ = checkout(price=40.0, quantity=2)
        pay_order(order_id)

        body = client.get("/orders/analytics/summary", headers=admin_headers).json()

        assert body["analytics"]["total_orders"] == 1
        assert body["analytics"]["total_revenue"] == 97.65
        assert body["top_products"][0]["total_quantity"] == 2
        assert set(body["period"]) == {"start_date", "end_date"}

    def test_customers_are_forbidden(self, client, user_headers):
        response = client.get("/orders/analytics/summary", headers=user_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"
