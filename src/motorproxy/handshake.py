"""
EBSCO login handshake.

The identity provider has no token endpoint; a session is obtained by
replaying the prompted sign-in flow of its login page:

1. GET the login page to receive the initial cookies.
2. POST the card number to the next-step endpoint.
3. POST the password to the same endpoint.
4. Read the credential from the cookies, the JSON body or the cookies of the
   final redirect.

Both the manual auth endpoint and the session manager drive this class.
"""

import uuid
from typing import Any, Optional

import httpx

from motorproxy.config import Config
from motorproxy.cookies import extract_credential, serialize_cookies
from motorproxy.errors import HandshakeNoTokenError, HandshakeTransportError
from motorproxy.http_client import send_following_redirects
from motorproxy.logger import get_logger

logger = get_logger(__name__)


def _check_status(response: httpx.Response, step: str) -> None:
    if not 200 <= response.status_code < 400:
        raise HandshakeTransportError(
            f"{step} failed with status {response.status_code}",
            status=response.status_code,
        )


def _body_token(response: httpx.Response) -> Optional[str]:
    try:
        data: Any = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    for field in Config.CREDENTIAL_BODY_FIELDS:
        value = data.get(field)
        if value:
            return str(value)
    return None


class EbscoHandshake:
    """Runs the multi-step EBSCO login and returns the session credential."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        login_url: str = Config.EBSCO_LOGIN_URL,
        next_step_url: str = Config.EBSCO_NEXT_STEP_URL,
    ):
        self.client = client
        self.login_url = login_url
        self.next_step_url = next_step_url

    async def perform(self, card_number: str, password: str) -> str:
        """
        Log in with a library card.

        Args:
            card_number: Library card number.
            password: Card password or PIN.

        Returns:
            The credential to attach as the ``Cookie`` header upstream.

        Raises:
            HandshakeNoTokenError: The flow completed without a credential.
            HandshakeTransportError: A step failed on the network or HTTP level.
        """
        try:
            return await self._run(card_number, password)
        except httpx.HTTPError as e:
            status = None
            if isinstance(e, httpx.HTTPStatusError):
                status = e.response.status_code
            raise HandshakeTransportError(str(e) or type(e).__name__, status=status) from e

    async def _run(self, card_number: str, password: str) -> str:
        params = dict(Config.EBSCO_LOGIN_PARAMS)
        params["requestIdentifier"] = str(uuid.uuid4())

        logger.info("Step 1: Getting login page...")
        login_page = await self.client.get(
            self.login_url, params=params, follow_redirects=False
        )
        _check_status(login_page, "Login page")
        cookies = serialize_cookies(login_page.headers)
        logger.debug(f"Login page set {len(login_page.headers.get_list('set-cookie'))} cookies")

        logger.info("Step 2: Submitting card number...")
        card_response = await self._submit_prompt(card_number, cookies)
        _check_status(card_response, "Card number step")
        if card_response.headers.get_list("set-cookie"):
            cookies = serialize_cookies(card_response.headers) or cookies

        logger.info("Step 3: Submitting password...")
        password_response = await self._submit_prompt(password, cookies)
        _check_status(password_response, "Password step")

        credential = None
        if password_response.headers.get_list("set-cookie"):
            credential = extract_credential(serialize_cookies(password_response.headers))
        if not credential:
            credential = _body_token(password_response)

        location = password_response.headers.get("location")
        if location:
            logger.info("Step 4: Following redirect...")
            redirect_url = password_response.url.join(location)
            request = self.client.build_request(
                "GET", redirect_url, headers={"Cookie": cookies} if cookies else None
            )
            redirect_response = await send_following_redirects(
                self.client, request, cookie=cookies
            )
            _check_status(redirect_response, "Login redirect")
            if redirect_response.headers.get_list("set-cookie"):
                credential = extract_credential(
                    serialize_cookies(redirect_response.headers)
                ) or credential

        if not credential:
            logger.error("Authentication failed - no auth token received")
            raise HandshakeNoTokenError(
                "The login flow completed without an auth token"
            )

        logger.info("EBSCO authentication successful")
        return credential

    async def _submit_prompt(self, value: str, cookies: str) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if cookies:
            headers["Cookie"] = cookies
        return await self.client.post(
            self.next_step_url,
            json={"action": "signin", "values": {"prompt": value}},
            headers=headers,
            follow_redirects=False,
        )
