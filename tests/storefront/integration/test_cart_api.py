"""Integration tests for the cart endpoints via TestClient."""

import pytest
from protean.exceptions import ExpectedVersionError

from storefront.cart.store import CartStore


def _add(client, headers, product_id="prod-A", quantity=1):
    return client.post("/cart/add", json={"productId": product_id, "quantity": quantity}, headers=headers)


class TestAuthentication:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/cart"),
            ("GET", "/cart/count"),
            ("POST", "/cart/add"),
            ("PUT", "/cart/update"),
            ("DELETE", "/cart/remove"),
            ("DELETE", "/cart/clear"),
        ],
    )
    def test_unauthenticated_requests_are_rejected(self, client, method, path):
        response = client.request(method, path, json={"productId": "prod-A", "quantity": 1})
        assert response.status_code == 401

    def test_invalid_token_rejected(self, client):
        response = client.get("/cart", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_token_signed_with_another_secret_rejected(self, client):
        from storefront.identity.credentials import TokenVerifier

        forged = TokenVerifier("some-other-secret").issue("u1")
        response = client.get("/cart", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 401


class TestGetCart:
    def test_empty_cart(self, client, user_headers):
        response = client.get("/cart", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["totalAmount"] == 0.0

    def test_request_id_is_echoed(self, client, user_headers):
        response = client.get("/cart", headers={**user_headers, "X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestAddToCart:
    def test_scenario_add_then_get(self, client, user_headers, products):
        response = _add(client, user_headers, "prod-A", 2)
        assert response.status_code == 200

        body = client.get("/cart", headers=user_headers).json()
        assert len(body["items"]) == 1
        line = body["items"][0]
        assert (line["product"], line["quantity"], line["price"]) == ("prod-A", 2, 100.0)
        assert body["totalAmount"] == 200.0

    def test_count(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        _add(client, user_headers, "prod-B", 1)
        assert client.get("/cart/count", headers=user_headers).json() == {"itemCount": 3}

    def test_carts_are_per_user(self, client, user_headers, other_user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        assert client.get("/cart", headers=other_user_headers).json()["items"] == []

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_invalid_quantity(self, client, user_headers, products, quantity):
        response = _add(client, user_headers, "prod-A", quantity)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"
        assert "quantity" in response.json()["fields"]

    def test_missing_product_id(self, client, user_headers):
        response = client.post("/cart/add", json={"quantity": 1}, headers=user_headers)
        assert response.status_code == 400

    def test_unavailable_product(self, client, user_headers, products):
        assert _add(client, user_headers, "prod-retired").status_code == 404
        assert _add(client, user_headers, "prod-unknown").status_code == 404


class TestUpdateCart:
    def test_update_to_zero_empties_cart(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        response = client.put("/cart/update", json={"productId": "prod-A", "quantity": 0}, headers=user_headers)

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["totalAmount"] == 0.0

    def test_update_missing_line(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        response = client.put("/cart/update", json={"productId": "prod-B", "quantity": 1}, headers=user_headers)
        assert response.status_code == 404

    def test_update_without_cart(self, client, user_headers):
        response = client.put("/cart/update", json={"productId": "prod-A", "quantity": 1}, headers=user_headers)
        assert response.status_code == 404

    def test_negative_quantity(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        response = client.put("/cart/update", json={"productId": "prod-A", "quantity": -2}, headers=user_headers)
        assert response.status_code == 400


class TestRemoveFromCart:
    def test_remove(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        _add(client, user_headers, "prod-B", 2)
        response = client.request("DELETE", "/cart/remove", json={"productId": "prod-A"}, headers=user_headers)

        assert response.status_code == 200
        assert [line["product"] for line in response.json()["items"]] == ["prod-B"]
        assert response.json()["totalAmount"] == 99.0

    def test_remove_by_path(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        response = client.delete("/cart/remove/prod-A", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_remove_twice(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        client.request("DELETE", "/cart/remove", json={"productId": "prod-A"}, headers=user_headers)
        response = client.request("DELETE", "/cart/remove", json={"productId": "prod-A"}, headers=user_headers)
        assert response.status_code == 404

    def test_scenario_serialized_object_is_rejected(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        before = client.get("/cart", headers=user_headers).json()

        response = client.request(
            "DELETE", "/cart/remove", json={"productId": "[object Object]"}, headers=user_headers
        )

        assert response.status_code == 400
        assert "product_id" in response.json()["fields"]
        assert client.get("/cart", headers=user_headers).json() == before

    def test_structured_product_id_is_rejected(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        response = client.request("DELETE", "/cart/remove", json={"productId": {"id": "prod-A"}}, headers=user_headers)
        assert response.status_code == 400


class TestClearCart:
    def test_clear(self, client, user_headers, products):
        _add(client, user_headers, "prod-A", 2)
        response = client.delete("/cart/clear", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["totalAmount"] == 0.0

    def test_clear_is_idempotent(self, client, user_headers):
        assert client.delete("/cart/clear", headers=user_headers).status_code == 200
        assert client.delete("/cart/clear", headers=user_headers).status_code == 200

    def test_unresolved_write_conflict_is_409(self, client, user_headers, products, monkeypatch):
        def always_stale(self, user_id, product_id, quantity):
            raise ExpectedVersionError("Wrong expected version")

        monkeypatch.setattr(CartStore, "add_item", always_stale)
        response = _add(client, user_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"
