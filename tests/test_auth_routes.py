"""Tests for the manual authentication endpoint."""

import pytest
from starlette.testclient import TestClient

from motorproxy.server import create_app

from conftest import CARD_NUMBER, PASSWORD


@pytest.fixture
def make_client(settings, fake_upstream):
    def _make(ebsco):
        app = create_app(
            settings,
            handshake_transport=ebsco.transport,
            upstream_transport=fake_upstream().transport,
        )
        return TestClient(app)

    return _make


class TestManualAuth:
    def test_returns_token(self, make_client, fake_ebsco):
        ebsco = fake_ebsco()
        client = make_client(ebsco)

        response = client.post(
            "/api/auth/ebsco", json={"cardNumber": CARD_NUMBER, "password": PASSWORD}
        )

        assert response.status_code == 200
        assert response.json() == {"authToken": "XYZ"}
        assert len(ebsco.requests) == 3

    def test_does_not_touch_managed_session(self, make_client, fake_ebsco):
        client = make_client(fake_ebsco())
        client.post(
            "/api/auth/ebsco", json={"cardNumber": CARD_NUMBER, "password": PASSWORD}
        )

        health = client.get("/health").json()
        assert health["session"] == "not authenticated"
        assert health["expiresInMinutes"] == 0

    def test_numeric_card_number(self, make_client, fake_ebsco):
        client = make_client(fake_ebsco())
        response = client.post(
            "/api/auth/ebsco", json={"cardNumber": 1001600244772, "password": PASSWORD}
        )
        assert response.status_code == 200

    @pytest.mark.parametrize(
        "body",
        [
            {"password": PASSWORD},
            {"cardNumber": CARD_NUMBER},
            {"cardNumber": "", "password": PASSWORD},
            {},
            ["not", "an", "object"],
        ],
    )
    def test_missing_fields(self, make_client, fake_ebsco, body):
        ebsco = fake_ebsco()
        response = make_client(ebsco).post("/api/auth/ebsco", json=body)

        assert response.status_code == 400
        assert response.json() == {
            "error": "Missing credentials",
            "message": "cardNumber and password are required",
        }
        assert ebsco.requests == []

    def test_invalid_json(self, make_client, fake_ebsco):
        response = make_client(fake_ebsco()).post(
            "/api/auth/ebsco",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_body_not_utf8(self, make_client, fake_ebsco):
        ebsco = fake_ebsco()
        response = make_client(ebsco).post(
            "/api/auth/ebsco",
            content=b'{"cardNumber":"\xff"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Missing credentials"
        assert ebsco.requests == []

    def test_no_token(self, make_client, fake_ebsco):
        ebsco = fake_ebsco(password_cookies=())
        response = make_client(ebsco).post(
            "/api/auth/ebsco", json={"cardNumber": CARD_NUMBER, "password": PASSWORD}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Authentication failed - no auth token received"

    def test_login_page_failure(self, make_client, fake_ebsco):
        ebsco = fake_ebsco(login_status=502)
        response = make_client(ebsco).post(
            "/api/auth/ebsco", json={"cardNumber": CARD_NUMBER, "password": PASSWORD}
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Authentication failed"
        assert body["status"] == 502

    def test_get_not_allowed(self, make_client, fake_ebsco):
        response = make_client(fake_ebsco()).get("/api/auth/ebsco")
        assert response.status_code == 405
