"""
In-memory state of the upstream session.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass
class SessionState:
    """Current credential and its expiry. Never persisted."""

    credential: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_valid(self, now: datetime) -> bool:
        return bool(self.credential) and self.expires_at is not None and now < self.expires_at

    def store(self, credential: str, now: datetime, ttl: timedelta) -> None:
        self.credential = credential
        self.expires_at = now + ttl

    def clear(self) -> None:
        self.credential = None
        self.expires_at = None

    def minutes_left(self, now: datetime) -> int:
        """Remaining lifetime rounded to the nearest minute, never negative."""
        if not self.credential or self.expires_at is None:
            return 0
        minutes = (self.expires_at - now).total_seconds() / 60
        return max(int(minutes + 0.5), 0)
