import pytest
from fastapi.testclient import TestClient

from app import create_app
from storefront.identity.credentials import ADMIN_ROLE, TokenVerifier

SECRET = "integration-secret"


@pytest.fixture()
def verifier():
    return TokenVerifier(SECRET)


@pytest.fixture()
def client(verifier, tmp_path):
    app = create_app(verifier=verifier, log_dir=tmp_path, init_domain=False)
    return TestClient(app)


@pytest.fixture()
def user_headers(verifier):
    return {"Authorization": f"Bearer {verifier.issue('u1')}"}


@pytest.fixture()
def other_user_headers(verifier):
    return {"Authorization": f"Bearer {verifier.issue('u2')}"}


@pytest.fixture()
def admin_headers(verifier):
    return {"Authorization": f"Bearer {verifier.issue('admin-1', roles=[ADMIN_ROLE])}"}


@pytest.fixture()
def products(client, admin_headers):
    """Publish a small catalogue through the admin endpoint."""
    for product_id, name, price, status in [
        ("prod-A", "Product A", 100.0, "active"),
        ("prod-B", "Product B", 49.5, "active"),
        ("prod-retired", "Old Product", 20.0, "discontinued"),
    ]:
        response = client.put(
            f"/catalogue/products/{product_id}",
            json={"name": name, "price": price, "status": status},
            headers=admin_headers,
        )
        assert response.status_code == 200
