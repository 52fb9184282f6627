"""
Error taxonomy for the proxy.

Every failure that reaches an HTTP handler is a ``ProxyError`` subclass and
is rendered as the JSON envelope ``{error, message, [status], [data]}``.
"""

from typing import Any, Dict, Optional

from starlette.responses import JSONResponse

from motorproxy.models import ErrorEnvelope


class ProxyError(Exception):
    """Base class for errors rendered as a JSON error envelope."""

    status_code = 500
    error = "Proxy request failed"

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        data: Any = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        envelope = ErrorEnvelope(
            error=self.error, message=self.message, status=self.status, data=self.data
        )
        return envelope.model_dump(exclude_none=True)


class MissingCredentialsError(ProxyError):
    """Manual auth request without a card number or password."""

    status_code = 400
    error = "Missing credentials"


class AuthError(ProxyError):
    """The external login handshake did not produce a credential."""

    error = "Authentication failed"


class HandshakeNoTokenError(AuthError):
    status_code = 401
    error = "Authentication failed - no auth token received"


class HandshakeTransportError(AuthError):
    """Network failure or unexpected HTTP status during the handshake."""

    status_code = 500


class NoActiveSessionError(ProxyError):
    status_code = 401
    error = "Authentication failed"


class UpstreamError(ProxyError):
    """The upstream answered, but with a response the proxy cannot relay."""

    def __init__(self, message: str, *, status: int, data: Any = None):
        super().__init__(message, status=status, data=data, status_code=status)


class ForwardTransportError(ProxyError):
    """The upstream could not be reached at all."""

    status_code = 500


def error_response(exc: ProxyError) -> JSONResponse:
    """Render a ``ProxyError`` as a JSON response."""
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)
