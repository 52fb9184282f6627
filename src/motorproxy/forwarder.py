"""
Request forwarding to the upstream hosts.

Inbound requests under a mount prefix are rewritten to an upstream URL,
sent with the session credential as the ``Cookie`` header and relayed back
with the upstream status, headers and body.
"""

from dataclasses import dataclass, field
from typing import Dict

import httpx
from starlette.requests import Request
from starlette.responses import Response

from motorproxy.config import Config
from motorproxy.errors import ForwardTransportError, NoActiveSessionError, UpstreamError
from motorproxy.http_client import send_following_redirects
from motorproxy.logger import get_logger
from motorproxy.session import SessionManager

logger = get_logger(__name__)

EBSCO = "ebsco"
MOTOR = "motor"

# Never copied from the inbound request. The client advertises only the
# encodings it can decode, so the relayed body always arrives decoded.
EXCLUDED_REQUEST_HEADERS = frozenset(
    {
        "host",
        "accept-encoding",
        "x-auth-token",
        "cookie",
        "content-length",
        "connection",
        "keep-alive",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

# Never relayed back to the client. The body is relayed decoded, so its
# original length and encoding no longer apply.
EXCLUDED_RESPONSE_HEADERS = frozenset(
    {"connection", "transfer-encoding", "content-length", "content-encoding"}
)


def resolve_upstream_url(mount: str, path: str, query: str = "") -> str:
    """
    Build the upstream URL for a mount and the path after its prefix.

    ``ebsco`` treats the path as ``host/path`` to reach directly; ``motor``
    appends it to the Motor M1 base URL.
    """
    path = path.lstrip("/")
    if mount == EBSCO:
        url = f"https://{path}"
    elif mount == MOTOR:
        url = f"{Config.MOTOR_BASE_URL}/{path}"
    else:
        raise ValueError(f"Unknown mount: {mount}")

    if query:
        url = f"{url}?{query}"
    return url


@dataclass
class ForwardRequest:
    """One outbound request derived from an inbound one."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    async def from_request(
        cls, request: Request, url: str, credential: str
    ) -> "ForwardRequest":
        headers = {
            key: value
            for key, value in request.headers.items()
            if key.lower() not in EXCLUDED_REQUEST_HEADERS
        }
        headers["Cookie"] = credential
        return cls(
            method=request.method,
            url=url,
            headers=headers,
            body=await request.body(),
        )


class Forwarder:
    """Relays requests to the upstreams with the managed credential."""

    def __init__(
        self,
        session: SessionManager,
        client: httpx.AsyncClient,
        max_redirects: int = Config.MAX_REDIRECTS,
    ):
        self.session = session
        self.client = client
        self.max_redirects = max_redirects

    async def forward(self, request: Request, url: str) -> Response:
        """
        Forward ``request`` to ``url`` and relay the upstream response.

        Raises:
            NoActiveSessionError: No credential could be obtained.
            UpstreamError: The upstream answered with a status outside 200-599.
            ForwardTransportError: The upstream could not be reached.
        """
        credential = await self.session.ensure_authenticated()
        if not credential:
            raise NoActiveSessionError(
                "Unable to authenticate with EBSCO. Check server logs for details."
            )

        outbound = await ForwardRequest.from_request(request, url, credential)
        logger.info(f"Proxying {outbound.method} request to: {outbound.url}")

        upstream = await self._send(outbound)

        if not 200 <= upstream.status_code < 600:
            raise UpstreamError(
                f"Upstream responded with status {upstream.status_code}",
                status=upstream.status_code,
                data=upstream.text or None,
            )
        if upstream.status_code >= 400:
            logger.warning(f"Upstream {outbound.url} responded {upstream.status_code}")

        return self._relay(upstream)

    async def _send(self, outbound: ForwardRequest) -> httpx.Response:
        httpx_request = self.client.build_request(
            outbound.method,
            outbound.url,
            headers=outbound.headers,
            content=outbound.body or None,
        )
        try:
            return await send_following_redirects(
                self.client,
                httpx_request,
                cookie=outbound.headers.get("Cookie"),
                max_redirects=self.max_redirects,
            )
        except httpx.HTTPError as e:
            logger.error(f"Proxy error for {outbound.url}: {e}")
            raise ForwardTransportError(str(e) or type(e).__name__) from e

    @staticmethod
    def _relay(upstream: httpx.Response) -> Response:
        response = Response(content=upstream.content, status_code=upstream.status_code)
        for key, value in upstream.headers.multi_items():
            if key.lower() in EXCLUDED_RESPONSE_HEADERS:
                continue
            response.headers.append(key, value)
        return response

