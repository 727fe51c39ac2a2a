"""Tests for the FastAPI routes."""

import json
from decimal import Decimal

from conftest import (
    WEBHOOK_SECRET,
    auth_header,
    checkout_body,
    count_orders,
    customer,
    order_by_reference,
    past,
    signed_webhook,
)
from storefront.services.webhook_service import sign
from storefront.utils.security import create_access_token


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "message": "API is working"}


class TestAuth:
    def test_missing_token(self, client):
        response = client.post("/api/process-payment", json=checkout_body())
        assert response.status_code == 401
        assert response.json() == {"error": "Access token required"}

    def test_garbage_token(self, client, buyer):
        response = client.post(
            "/api/process-payment",
            json=checkout_body(),
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Invalid token"

    def test_expired_token(self, client, buyer):
        token = create_access_token(buyer.id, expires_in=-10)
        response = client.get("/api/orders", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403

    def test_unverified_email(self, client, db, buyer):
        buyer.email_verified = False
        db.commit()
        response = client.get("/api/orders", headers=auth_header(buyer))
        assert response.status_code == 401
        assert response.json()["error"] == "Email verification required"


class TestProcessPayment:
    def test_reference_scenario(self, client, db, buyer, gateway, make_discount):
        make_discount(code="SAVE10", percentage=10)
        body = checkout_body(discount=10, promoCode="SAVE10", shippingFee=3500)

        response = client.post("/api/process-payment", json=body, headers=auth_header(buyer))

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["authorization_url"] == "https://checkout.paystack.com/ref_0001"
        assert gateway.calls[0]["amount"] == 6_110_000

        order = order_by_reference(db, data["reference"])
        assert order.status == "pending"
        assert order.subtotal == Decimal("64000.00")
        assert order.discount_amount == Decimal("6400.00")
        assert order.total_amount == Decimal("61100.00")

    def test_empty_address(self, client, db, buyer, gateway):
        body = checkout_body(customerDetails=customer(address="").model_dump())

        response = client.post("/api/process-payment", json=body, headers=auth_header(buyer))

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required payment information."
        assert gateway.calls == []
        assert count_orders(db) == 0

    def test_null_address(self, client, db, buyer, gateway):
        body = checkout_body()
        body["customerDetails"]["address"] = None

        response = client.post("/api/process-payment", json=body, headers=auth_header(buyer))

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required payment information."}
        assert gateway.calls == []
        assert count_orders(db) == 0

    def test_malformed_item(self, client, db, buyer, gateway):
        body = checkout_body(items=[{"id": 1, "name": "Anchor Hoodie", "price": "free", "quantity": 1}])

        response = client.post("/api/process-payment", json=body, headers=auth_header(buyer))

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request: items.0.price")
        assert gateway.calls == []

    def test_missing_customer_details(self, client, buyer, gateway):
        body = checkout_body()
        del body["customerDetails"]

        response = client.post("/api/process-payment", json=body, headers=auth_header(buyer))

        assert response.status_code == 400
        assert gateway.calls == []

    def test_gateway_failure(self, client, db, buyer, gateway):
        gateway.fail = True

        response = client.post("/api/process-payment", json=checkout_body(), headers=auth_header(buyer))

        assert response.status_code == 400
        assert response.json()["error"] == "Payment gateway unavailable"
        assert count_orders(db) == 0

    def test_profile_missing(self, client, user_without_profile):
        response = client.post(
            "/api/process-payment", json=checkout_body(), headers=auth_header(user_without_profile)
        )

        assert response.status_code == 400
        assert "complete your profile" in response.json()["error"]

    def test_invalid_promo(self, client, buyer, gateway):
        body = checkout_body(discount=10, promoCode="GHOST")

        response = client.post("/api/process-payment", json=body, headers=auth_header(buyer))

        assert response.status_code == 400
        assert gateway.calls == []


class TestWebhookEndpoint:
    def _checkout(self, client, buyer):
        response = client.post("/api/process-payment", json=checkout_body(), headers=auth_header(buyer))
        return response.json()["reference"]

    def test_charge_success(self, client, db, buyer, notifier):
        reference = self._checkout(client, buyer)
        body, headers = signed_webhook("charge.success", reference)

        response = client.post("/api/paystack-webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert response.text == "Webhook received"
        assert order_by_reference(db, reference).status == "completed"
        assert len(notifier.seller) == 1 and len(notifier.buyer) == 1

    def test_duplicate_delivery(self, client, db, buyer, notifier):
        reference = self._checkout(client, buyer)
        body, headers = signed_webhook("charge.success", reference)

        first = client.post("/api/paystack-webhook", content=body, headers=headers)
        second = client.post("/api/paystack-webhook", content=body, headers=headers)

        assert first.status_code == 200 and second.status_code == 200
        assert len(notifier.seller) == 1 and len(notifier.buyer) == 1

    def test_unknown_reference(self, client, db, notifier):
        body, headers = signed_webhook("charge.success", "ref_unknown")

        response = client.post("/api/paystack-webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert count_orders(db) == 0
        assert notifier.seller == [] and notifier.buyer == []

    def test_missing_signature(self, client, db, buyer):
        reference = self._checkout(client, buyer)
        body, _ = signed_webhook("charge.success", reference)

        response = client.post(
            "/api/paystack-webhook", content=body, headers={"content-type": "application/json"}
        )

        assert response.status_code == 401
        assert order_by_reference(db, reference).status == "pending"

    def test_forged_signature(self, client, db, buyer):
        reference = self._checkout(client, buyer)
        body, _ = signed_webhook("charge.success", reference)

        response = client.post(
            "/api/paystack-webhook",
            content=body,
            headers={"x-paystack-signature": sign(body, "guess"), "content-type": "application/json"},
        )

        assert response.status_code == 401
        assert order_by_reference(db, reference).status == "pending"

    def test_payment_failed(self, client, db, buyer, notifier):
        reference = self._checkout(client, buyer)
        body, headers = signed_webhook("charge.failed", reference)

        response = client.post("/api/paystack-webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert order_by_reference(db, reference).status == "payment_failed"
        assert notifier.seller == []

    def test_unrecognized_event_without_reference(self, client, db):
        body = json.dumps({"event": "customeridentification.success", "data": {"customer_id": 1}}).encode()
        headers = {"x-paystack-signature": sign(body, WEBHOOK_SECRET), "content-type": "application/json"}

        response = client.post("/api/paystack-webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert response.text == "Webhook received"

    def test_success_without_reference(self, client):
        body = json.dumps({"event": "charge.success", "data": {}}).encode()
        headers = {"x-paystack-signature": sign(body, WEBHOOK_SECRET), "content-type": "application/json"}

        response = client.post("/api/paystack-webhook", content=body, headers=headers)

        assert response.status_code == 400
        assert "error" in response.json()


class TestDiscountValidate:
    def test_valid(self, client, make_discount):
        make_discount(code="SAVE10", percentage=10)

        response = client.post("/api/discount/validate", json={"code": "save10"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["discount"]["code"] == "SAVE10"
        assert data["discount"]["discount_percentage"] == 10

    def test_expired(self, client, make_discount):
        make_discount(code="EXPIRED10", expires_at=past())

        response = client.post("/api/discount/validate", json={"code": "EXPIRED10"})

        assert response.status_code == 200
        assert response.json() == {"valid": False}

    def test_code_required(self, client):
        response = client.post("/api/discount/validate", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Code is required"}

    def test_non_string_code(self, client):
        response = client.post("/api/discount/validate", json={"code": 123})

        assert response.status_code == 400
        assert "detail" not in response.json()
        assert response.json()["error"].startswith("Invalid request: code")


class TestOrderHistory:
    def test_lists_own_orders(self, client, buyer, admin):
        client.post("/api/process-payment", json=checkout_body(), headers=auth_header(buyer))
        client.post("/api/process-payment", json=checkout_body(), headers=auth_header(admin))

        response = client.get("/api/orders", headers=auth_header(buyer))

        assert response.status_code == 200
        orders = response.json()
        assert len(orders) == 1
        assert orders[0]["status"] == "pending"
        assert orders[0]["items"][0]["name"] == "Anchor Hoodie"
        assert Decimal(orders[0]["total_amount"]) == Decimal("67500.00")

    def test_without_profile_is_empty(self, client, user_without_profile):
        response = client.get("/api/orders", headers=auth_header(user_without_profile))
        assert response.status_code == 200
        assert response.json() == []


class TestAdmin:
    def test_non_admin_forbidden(self, client, buyer):
        response = client.get("/api/admin/orders", headers=auth_header(buyer))
        assert response.status_code == 403
        assert response.json() == {"error": "Admin access required"}

    def test_list_all_orders(self, client, buyer, admin):
        client.post("/api/process-payment", json=checkout_body(), headers=auth_header(buyer))

        response = client.get("/api/admin/orders", headers=auth_header(admin))

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_generate_promo(self, client, admin):
        response = client.post(
            "/api/admin/generate-promo",
            json={"code": "launch15", "discount_percentage": 15, "usage_limit": 50},
            headers=auth_header(admin),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["promoCode"]["code"] == "LAUNCH15"
        assert client.post("/api/discount/validate", json={"code": "LAUNCH15"}).json()["valid"] is True

    def test_generate_promo_requires_fields(self, client, admin):
        response = client.post(
            "/api/admin/generate-promo", json={"code": "X"}, headers=auth_header(admin)
        )
        assert response.status_code == 400

    def test_update_shipping_keeps_status(self, client, db, buyer, admin):
        reference = client.post(
            "/api/process-payment", json=checkout_body(), headers=auth_header(buyer)
        ).json()["reference"]
        order_id = str(order_by_reference(db, reference).id)

        response = client.patch(
            f"/api/admin/orders/{order_id}/shipping",
            json={"shipping_carrier": "GIG Logistics", "tracking_number": "GIG-123"},
            headers=auth_header(admin),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["shipping_carrier"] == "GIG Logistics"
        assert data["tracking_number"] == "GIG-123"
        assert data["status"] == "pending"

    def test_update_shipping_unknown_order(self, client, admin):
        response = client.patch(
            "/api/admin/orders/00000000-0000-0000-0000-000000000000/shipping",
            json={"tracking_number": "X"},
            headers=auth_header(admin),
        )
        assert response.status_code == 404
