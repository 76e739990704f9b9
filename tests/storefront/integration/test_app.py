from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app import create_app
from storefront.identity.credentials import AUTH_SECRET_ENV, MissingAuthSecret, TokenVerifier
from storefront.utils.logging import add_context, clear_context


class TestCreateApp:
    def test_missing_secret_aborts_startup(self, monkeypatch, tmp_path):
        monkeypatch.delenv(AUTH_SECRET_ENV, raising=False)
        with pytest.raises(MissingAuthSecret):
            create_app(log_dir=tmp_path, init_domain=False)

    def test_secret_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(AUTH_SECRET_ENV, "from-env")
        app = create_app(log_dir=tmp_path, init_domain=False)
        assert app.state.token_verifier.secret == "from-env"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "domain": "storefront"}

    def test_expired_token_is_rejected(self, client, verifier):
        token = verifier.issue("u1", expires_in=timedelta(seconds=-60))
        response = client.get("/cart", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_signed_with_other_secret(self, client):
        token = TokenVerifier("some-other-secret").issue("u1")
        response = client.get("/cart", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestLoggingContext:
    def test_request_and_user_bound_then_cleared(self, client, user_headers, monkeypatch):
        bound = {}
        cleared = []

        def record_context(**kwargs):
            bound.update(kwargs)
            add_context(**kwargs)

        def record_clear():
            cleared.append(True)
            clear_context()

        monkeypatch.setattr("app.add_context", record_context)
        monkeypatch.setattr("app.clear_context", record_clear)
        monkeypatch.setattr("storefront.api.dependencies.add_context", record_context)

        response = client.get("/cart", headers={**user_headers, "X-Request-ID": "req-42"})

        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == "req-42"
        assert bound == {"request_id": "req-42", "path": "/cart", "user_id": "u1"}
        assert cleared == [True]
