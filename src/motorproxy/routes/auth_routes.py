"""
Manual authentication route.

``POST /api/auth/ebsco`` runs the login handshake with caller-supplied card
credentials and returns the credential without touching the server-managed
session.
"""

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from motorproxy.errors import MissingCredentialsError, ProxyError, error_response
from motorproxy.logger import get_logger
from motorproxy.models import ManualAuthRequest, ManualAuthResponse

logger = get_logger(__name__)


async def _read_body(request: Request) -> ManualAuthRequest:
    try:
        data = await request.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        raise MissingCredentialsError("cardNumber and password are required")

    try:
        body = ManualAuthRequest.model_validate(data)
    except ValidationError:
        raise MissingCredentialsError("cardNumber and password are required")
    if not body.complete:
        raise MissingCredentialsError("cardNumber and password are required")
    return body


async def ebsco_login(request: Request) -> JSONResponse:
    """
    Run the EBSCO handshake for the given card.

    Body:
        {"cardNumber": "...", "password": "..."}

    Returns:
        200 {"authToken": ...}; 400 on missing fields; 401 when no token was
        obtained; 500 on transport failure.
    """
    try:
        body = await _read_body(request)
        handshake = request.app.state.handshake
        token = await handshake.perform(body.card_number, body.password)
        return JSONResponse(ManualAuthResponse(auth_token=token).model_dump(by_alias=True))
    except ProxyError as e:
        logger.error(f"EBSCO authentication error: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected EBSCO authentication error: {e}")
        return JSONResponse(
            {"error": "Authentication failed", "message": str(e)}, status_code=500
        )
