"""
Starlette application for the Motor.com M1 proxy.

Endpoints:
- POST /api/auth/ebsco: run the EBSCO login for a given card (manual mode)
- ALL /api/ebsco-proxy/{path}: forward to https://{path}
- ALL /api/motor-proxy/{path}: forward to https://sites.motor.com/m1/{path}
- GET /health: session status

The app factory builds one handshake, one session manager and one
forwarder, and keeps them on ``app.state`` for the route handlers.
"""

import contextlib
from datetime import timedelta
from typing import Optional

import httpx
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from motorproxy.config import Config, ProxySettings, load_settings
from motorproxy.forwarder import Forwarder
from motorproxy.handshake import EbscoHandshake
from motorproxy.http_client import create_client
from motorproxy.logger import get_logger, setup_logging
from motorproxy.middleware import RequestLoggingMiddleware
from motorproxy.routes.auth_routes import ebsco_login
from motorproxy.routes.health_routes import health_check
from motorproxy.routes.proxy_routes import PROXY_METHODS, ebsco_proxy, motor_proxy
from motorproxy.session import SessionManager

logger = get_logger(__name__)


def log_banner(settings: ProxySettings) -> None:
    """Log the authentication mode and the available endpoints."""
    base = f"http://localhost:{settings.port}"
    logger.info("=" * 70)
    logger.info("Motor.com M1 Proxy Server")
    logger.info(f"Authentication Mode: {'AUTOMATIC' if settings.auto_auth else 'MANUAL'}")
    if settings.auto_auth:
        logger.info(f"  Card Number: {settings.card_number}")
        logger.info(f"  Password: {'***SET***' if settings.password else 'NOT SET!'}")
        if not settings.password:
            logger.warning("Password not configured! Set the EBSCO_PASSWORD environment variable.")
    logger.info("Available endpoints:")
    logger.info(f"  Motor.com Proxy: *    {base}{Config.MOTOR_MOUNT}/*")
    logger.info(f"  EBSCO Proxy:     *    {base}{Config.EBSCO_MOUNT}/*")
    logger.info(f"  Manual Auth:     POST {base}/api/auth/ebsco")
    logger.info(f"  Health Check:    GET  {base}/health")
    if settings.auto_auth_ready:
        logger.info("Frontend requests will be automatically authenticated.")
    else:
        logger.info("Manual authentication required for requests.")
    logger.info("=" * 70)


def create_app(
    settings: Optional[ProxySettings] = None,
    handshake_transport: Optional[httpx.AsyncBaseTransport] = None,
    upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Starlette:
    """
    Build the proxy application.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        handshake_transport: Transport for the identity provider client.
        upstream_transport: Transport for the forwarding client.
    """
    settings = settings or load_settings()

    handshake_client = create_client(settings.handshake_timeout_seconds, handshake_transport)
    upstream_client = create_client(settings.upstream_timeout_seconds, upstream_transport)

    handshake = EbscoHandshake(handshake_client)
    session = SessionManager(
        handshake,
        card_number=settings.card_number,
        password=settings.password,
        auto_auth=settings.auto_auth,
        ttl=timedelta(minutes=settings.session_ttl_minutes),
    )
    forwarder = Forwarder(session, upstream_client)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        log_banner(settings)
        if settings.auto_auth_ready:
            logger.info("Initializing automatic authentication...")
            await session.refresh()
        try:
            yield
        finally:
            logger.info("Application shutdown - closing upstream clients")
            await handshake_client.aclose()
            await upstream_client.aclose()

    app = Starlette(
        routes=[
            Route("/api/auth/ebsco", ebsco_login, methods=["POST"]),
            Route(
                f"{Config.EBSCO_MOUNT}/{{path:path}}",
                ebsco_proxy,
                methods=PROXY_METHODS,
            ),
            Route(
                f"{Config.MOTOR_MOUNT}/{{path:path}}",
                motor_proxy,
                methods=PROXY_METHODS,
            ),
            Route("/health", health_check, methods=["GET"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["*"],
                allow_headers=["*"],
            ),
            Middleware(RequestLoggingMiddleware),
        ],
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.handshake = handshake
    app.state.session = session
    app.state.forwarder = forwarder
    return app


def main() -> None:
    """Run the proxy with settings from the environment."""
    import uvicorn

    settings = load_settings()
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    logger.info(f"Starting proxy on http://{settings.host}:{settings.port}")
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
