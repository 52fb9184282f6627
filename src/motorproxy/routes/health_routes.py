"""
Health check endpoint.
"""

from starlette.requests import Request
from starlette.responses import JSONResponse

from motorproxy.models import HealthResponse


async def health_check(request: Request) -> JSONResponse:
    """
    Report whether the server holds an upstream session.

    Always 200; ``session`` and ``expiresInMinutes`` describe the cached
    credential.
    """
    settings = request.app.state.settings
    session_status = request.app.state.session.status()
    payload = HealthResponse(
        status="ok",
        auto_auth=settings.auto_auth,
        session=session_status["session"],
        expires_in_minutes=session_status["expiresInMinutes"],
    )
    return JSONResponse(payload.model_dump(by_alias=True))
