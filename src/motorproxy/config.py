"""
Configuration for the proxy.

Fixed upstream constants live on ``Config``. Everything that differs between
deployments is read from the environment (and an optional ``.env`` file)
into a frozen ``ProxySettings`` instance by ``load_settings()``.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


class Config:
    # Identity provider
    EBSCO_LOGIN_URL = "https://login.ebsco.com/"
    EBSCO_LOGIN_PARAMS = {
        "custId": "s5672256",
        "groupId": "main",
        "profId": "autorepso",
    }
    EBSCO_NEXT_STEP_URL = "https://login.ebsco.com/api/login/v1/prompted/next-step"
    CREDENTIAL_COOKIE_NAMES = ("ebsco-auth", "authToken")
    CREDENTIAL_BODY_FIELDS = ("authToken", "token")

    # Upstreams
    MOTOR_BASE_URL = "https://sites.motor.com/m1"
    EBSCO_MOUNT = "/api/ebsco-proxy"
    MOTOR_MOUNT = "/api/motor-proxy"
    MAX_REDIRECTS = 5

    # Defaults
    DEFAULT_CARD_NUMBER = "1001600244772"
    DEFAULT_HOST = "0.0.0.0"
    DEFAULT_PORT = 3001
    DEFAULT_SESSION_TTL_MINUTES = 25


_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name, "") or "").strip() or default


def _env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name, "") or "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name, "") or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class ProxySettings:
    auto_auth: bool = True
    card_number: str = Config.DEFAULT_CARD_NUMBER
    password: str = ""
    host: str = Config.DEFAULT_HOST
    port: int = Config.DEFAULT_PORT
    session_ttl_minutes: float = Config.DEFAULT_SESSION_TTL_MINUTES
    upstream_timeout_seconds: float = 30.0
    handshake_timeout_seconds: float = 20.0
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def auto_auth_ready(self) -> bool:
        """Auto-auth needs both the flag and a configured password."""
        return self.auto_auth and bool(self.password)


def load_settings(env_file: Optional[str] = None) -> ProxySettings:
    """
    Build settings from environment variables.

    Variables from ``env_file`` (or a ``.env`` in the working directory) are
    loaded first without overriding values already present in the process
    environment.
    """
    load_dotenv(env_file)

    ttl = _env_float("SESSION_TTL_MINUTES", Config.DEFAULT_SESSION_TTL_MINUTES)
    if ttl <= 0:
        ttl = Config.DEFAULT_SESSION_TTL_MINUTES

    return ProxySettings(
        auto_auth=_env_bool("EBSCO_AUTO_AUTH", True),
        card_number=_env_str("EBSCO_CARD_NUMBER", Config.DEFAULT_CARD_NUMBER),
        password=os.getenv("EBSCO_PASSWORD", "") or "",
        host=_env_str("PROXY_HOST", Config.DEFAULT_HOST),
        port=int(_env_float("PROXY_PORT", Config.DEFAULT_PORT)),
        session_ttl_minutes=ttl,
        upstream_timeout_seconds=_env_float("UPSTREAM_TIMEOUT_SECONDS", 30.0),
        handshake_timeout_seconds=_env_float("HANDSHAKE_TIMEOUT_SECONDS", 20.0),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        log_file=_env_str("LOG_FILE") or None,
    )
