"""
Outbound HTTP helpers shared by the handshake and the forwarder.
"""

from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Optional

import httpx

from motorproxy.config import Config
from motorproxy.logger import get_logger

logger = get_logger(__name__)


def create_client(
    timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """
    Create an async client for upstream traffic.

    Redirects are never followed by the client itself; callers decide per
    request through ``send_following_redirects``. The cookie jar rejects
    every cookie: cookies travel only in explicit ``Cookie`` headers.
    """
    return httpx.AsyncClient(
        cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
        timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
        follow_redirects=False,
        max_redirects=Config.MAX_REDIRECTS,
        transport=transport,
    )


async def send_following_redirects(
    client: httpx.AsyncClient,
    request: httpx.Request,
    cookie: Optional[str] = None,
    max_redirects: int = Config.MAX_REDIRECTS,
) -> httpx.Response:
    """
    Send a request and follow up to ``max_redirects`` redirects.

    httpx drops an explicit ``Cookie`` header when it builds a redirect
    request, so the header is put back on every hop that stays on the
    original host.

    Raises:
        httpx.TooManyRedirects: When the chain is longer than allowed.
        httpx.HTTPError: On any transport failure.
    """
    origin_host = request.url.host
    response = await client.send(request, follow_redirects=False)

    hops = 0
    while response.next_request is not None:
        next_request = response.next_request
        if hops >= max_redirects:
            await response.aclose()
            raise httpx.TooManyRedirects(
                f"Exceeded maximum allowed redirects ({max_redirects}).",
                request=next_request,
            )
        if cookie and next_request.url.host == origin_host:
            next_request.headers["Cookie"] = cookie

        logger.debug(f"Following redirect {hops + 1} to {next_request.url}")
        await response.aclose()
        response = await client.send(next_request, follow_redirects=False)
        hops += 1

    return response
