"""
Forwarding routes.

- ``/api/ebsco-proxy/{path}``: ``https://{path}``
- ``/api/motor-proxy/{path}``: ``https://sites.motor.com/m1/{path}``

Both accept every method and inject the server-managed credential.
"""

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from motorproxy.config import Config
from motorproxy.errors import ProxyError, error_response
from motorproxy.forwarder import EBSCO, MOTOR, resolve_upstream_url
from motorproxy.logger import get_logger

logger = get_logger(__name__)

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

MOUNT_PREFIXES = {EBSCO: Config.EBSCO_MOUNT, MOTOR: Config.MOTOR_MOUNT}


def upstream_path(request: Request, mount: str) -> str:
    """
    Return the path after the mount prefix exactly as the client encoded it.

    ``path_params`` holds the percent-decoded path, where ``%3F`` or ``%2F``
    have already turned into ``?`` and ``/``; the raw path keeps them.
    Falls back to the decoded parameter when the server sends no raw path.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path:
        raw = raw_path.split(b"?", 1)[0].decode("latin-1")
        prefix = MOUNT_PREFIXES[mount] + "/"
        index = raw.find(prefix)
        if index != -1:
            return raw[index + len(prefix):]
    return request.path_params.get("path", "")


async def _proxy(request: Request, mount: str) -> Response:
    try:
        url = resolve_upstream_url(
            mount, upstream_path(request, mount), request.url.query
        )
        return await request.app.state.forwarder.forward(request, url)
    except ProxyError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected {mount} proxy error: {e}")
        return JSONResponse(
            {"error": "Proxy request failed", "message": str(e)}, status_code=500
        )


async def ebsco_proxy(request: Request) -> Response:
    return await _proxy(request, EBSCO)


async def motor_proxy(request: Request) -> Response:
    return await _proxy(request, MOTOR)
