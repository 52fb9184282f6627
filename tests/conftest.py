"""Shared pytest fixtures and configuration."""

import json

import httpx
import pytest

from motorproxy.config import ProxySettings

CARD_NUMBER = "1001600244772"
PASSWORD = "secret-pin"

_ENV_VARS = (
    "EBSCO_AUTO_AUTH",
    "EBSCO_CARD_NUMBER",
    "EBSCO_PASSWORD",
    "PROXY_HOST",
    "PROXY_PORT",
    "PROXY_URL",
    "SESSION_TTL_MINUTES",
    "UPSTREAM_TIMEOUT_SECONDS",
    "HANDSHAKE_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without proxy variables and restore them afterwards."""
    for name in _ENV_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)


class FakeEbsco:
    """
    Scripted identity provider for ``httpx.MockTransport``.

    The login page sets ``sess=abc`` and ``csrf=1``; the card number step
    replaces them with ``sess=def``. What the password step returns is
    configurable.
    """

    def __init__(
        self,
        password_cookies=("ebsco-auth=XYZ; Path=/; HttpOnly",),
        password_json=None,
        location=None,
        redirect_cookies=(),
        card_cookies=("sess=def; Path=/",),
        login_status=200,
    ):
        self.password_cookies = list(password_cookies)
        self.password_json = password_json
        self.location = location
        self.redirect_cookies = list(redirect_cookies)
        self.card_cookies = list(card_cookies)
        self.login_status = login_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path == "/api/login/v1/prompted/next-step":
            body = json.loads(request.content)
            if body["values"]["prompt"] != PASSWORD:
                return httpx.Response(
                    200,
                    json={"step": "password"},
                    headers=[("set-cookie", c) for c in self.card_cookies],
                )
            headers = [("set-cookie", c) for c in self.password_cookies]
            if self.location:
                headers.append(("location", self.location))
            return httpx.Response(
                302 if self.location else 200,
                json=self.password_json or {},
                headers=headers,
            )

        if request.method == "GET" and request.url.path == "/":
            return httpx.Response(
                self.login_status,
                text="<html>login</html>",
                headers=[
                    ("set-cookie", "sess=abc; Path=/"),
                    ("set-cookie", "csrf=1; HttpOnly"),
                ],
            )

        if request.method == "GET" and request.url.path == "/done":
            return httpx.Response(
                200, headers=[("set-cookie", c) for c in self.redirect_cookies]
            )

        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FakeUpstream:
    """Records forwarded requests and answers with a scripted response."""

    def __init__(self, responder=None):
        self.requests: list[httpx.Request] = []
        self.responder = responder or (lambda request: httpx.Response(200, json={"ok": True}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def fake_ebsco():
    """Factory for scripted identity providers."""
    return FakeEbsco


@pytest.fixture
def fake_upstream():
    """Factory for scripted upstream services."""
    return FakeUpstream


@pytest.fixture
def settings():
    """Settings with auto-auth ready to run."""
    return ProxySettings(auto_auth=True, card_number=CARD_NUMBER, password=PASSWORD)
