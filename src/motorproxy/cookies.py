"""
Cookie helpers for the login handshake and the forwarder.

Cookies are carried around as a single serialized ``Cookie`` header value
(``"a=1; b=2"``) rather than a cookie jar, because the upstreams expect the
exact set of cookies the identity provider handed out.
"""

from typing import Iterable, Mapping, Optional, Union

import httpx

from motorproxy.config import Config

HeadersLike = Union[httpx.Headers, Mapping[str, str], Iterable[str], None]


def _set_cookie_values(headers: HeadersLike) -> list[str]:
    if headers is None:
        return []
    if isinstance(headers, httpx.Headers):
        return headers.get_list("set-cookie")
    if isinstance(headers, Mapping):
        value = headers.get("set-cookie") or headers.get("Set-Cookie")
        if value is None:
            return []
        return list(value) if isinstance(value, (list, tuple)) else [value]
    return list(headers)


def serialize_cookies(headers: HeadersLike) -> str:
    """
    Collapse every ``Set-Cookie`` header into one ``Cookie`` header value.

    Only the ``name=value`` part of each entry is kept; attributes such as
    ``Path``, ``Domain``, ``Expires`` or ``HttpOnly`` are dropped.

    Args:
        headers: Response headers, or the raw ``Set-Cookie`` values.

    Returns:
        The entries joined with ``"; "``, or an empty string.
    """
    return "; ".join(value.split(";")[0] for value in _set_cookie_values(headers))


def find_cookie(serialized: str, name: str) -> Optional[str]:
    """
    Look up a cookie value in a serialized cookie string.

    A value that itself contains ``=`` is cut at its first ``=``; callers
    relying on base64-style values should keep the whole serialized string.
    """
    if not serialized:
        return None
    for piece in serialized.split("; "):
        parts = piece.split("=")
        if parts[0] == name:
            return parts[1] if len(parts) > 1 else None
    return None


def extract_credential(serialized: str) -> Optional[str]:
    """
    Pick the session credential out of a serialized cookie string.

    Named credential cookies win in ``Config.CREDENTIAL_COOKIE_NAMES`` order.
    Without one, the whole cookie string is the credential since the
    upstreams may need several of the cookies together.
    """
    for name in Config.CREDENTIAL_COOKIE_NAMES:
        value = find_cookie(serialized, name)
        if value:
            return value
    return serialized or None
