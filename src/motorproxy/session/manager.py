"""
Server-managed EBSCO session.

One ``SessionManager`` is created per application. It hands out the cached
credential while it is fresh and runs the login handshake when it is not.
Concurrent callers that arrive during a refresh wait for that same refresh
instead of starting their own.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from motorproxy.config import Config
from motorproxy.errors import AuthError
from motorproxy.handshake import EbscoHandshake
from motorproxy.logger import get_logger
from motorproxy.session.state import SessionState

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """
    Owns the upstream credential and its refresh.

    Handshake failures are logged and turned into ``None``; they never
    propagate to callers.
    """

    def __init__(
        self,
        handshake: EbscoHandshake,
        card_number: str,
        password: str,
        auto_auth: bool = True,
        ttl: timedelta = timedelta(minutes=Config.DEFAULT_SESSION_TTL_MINUTES),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.handshake = handshake
        self.card_number = card_number
        self.password = password
        self.auto_auth = auto_auth
        self.ttl = ttl
        self._clock = clock
        self._state = SessionState()
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def credential(self) -> Optional[str]:
        return self._state.credential

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._state.expires_at

    @property
    def refresh_in_progress(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    @property
    def can_refresh(self) -> bool:
        return self.auto_auth and bool(self.password)

    async def ensure_authenticated(self) -> Optional[str]:
        """
        Return a fresh credential, logging in again when needed.

        Returns:
            The credential, or None when no session could be obtained.
        """
        if self._state.is_valid(self._clock()):
            return self._state.credential

        logger.info("Session expired or not found, re-authenticating...")
        return await self.refresh()

    async def refresh(self) -> Optional[str]:
        """Run the handshake once, sharing an in-flight run with concurrent callers."""
        if not self.auto_auth:
            logger.warning("Auto-authentication is disabled")
            return None
        if not self.password:
            logger.warning(
                "Auto-authentication enabled but password not set! "
                "Set the EBSCO_PASSWORD environment variable."
            )
            return None

        if self.refresh_in_progress:
            logger.info("Authentication already in progress, waiting for it...")
        else:
            self._refresh_task = asyncio.create_task(self._run_handshake())

        return await asyncio.shield(self._refresh_task)

    async def _run_handshake(self) -> Optional[str]:
        logger.info(f"Performing automatic EBSCO authentication (card {self.card_number})")
        try:
            credential = await self.handshake.perform(self.card_number, self.password)
        except AuthError as e:
            logger.error(f"Auto-authentication error: {e.message}")
            self._state.clear()
            return None
        except Exception as e:
            logger.exception(f"Unexpected auto-authentication error: {e}")
            self._state.clear()
            return None
        finally:
            self._refresh_task = None

        self._state.store(credential, self._clock(), self.ttl)
        logger.info(f"Auto-authentication successful, session expires at {self._state.expires_at:%H:%M:%S} UTC")
        return credential

    def invalidate(self) -> None:
        """Forget the current credential."""
        self._state.clear()

    def status(self) -> Dict[str, Any]:
        """Session summary for the health endpoint."""
        now = self._clock()
        return {
            "session": "authenticated" if self._state.credential else "not authenticated",
            "expiresInMinutes": self._state.minutes_left(now),
        }
