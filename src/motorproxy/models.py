"""
Pydantic models for the HTTP surface.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ManualAuthRequest(BaseModel):
    """Body of ``POST /api/auth/ebsco``."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    card_number: str = Field(default="", alias="cardNumber")
    password: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.card_number) and bool(self.password)


class ManualAuthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth_token: str = Field(alias="authToken")


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    auto_auth: bool = Field(alias="autoAuth")
    session: str
    expires_in_minutes: int = Field(alias="expiresInMinutes")


class ErrorEnvelope(BaseModel):
    """JSON error body returned by every failing endpoint."""

    error: str
    message: Optional[str] = None
    status: Optional[int] = None
    data: Any = None
