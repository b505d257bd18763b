"""
SIA API: Authentication Schemas
===============================

What:  Request/response bodies for /api/auth/register, /login and
       /refresh-token.
How:   Token fields travel as camelCase (`accessToken`, `refreshToken`),
       matching the published contract.
"""

import uuid
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sia_api.schemas.account import normalize_email

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserSummary(BaseModel):
    """The only account fields echoed back by the auth endpoints."""

    id: uuid.UUID
    email: str

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    """
    Credentials for POST /api/auth/login.

    No format rules beyond "present": a malformed email is simply an
    unknown one and gets the same 401 as a wrong password.
    """

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> Any:
        return normalize_email(v)


class RefreshRequest(BaseModel):
    # Optional so a missing token reaches the service and gets its own 401.
    refresh_token: Optional[str] = None

    model_config = _camel


class RegisterResponse(BaseModel):
    message: str = Field(default="User created successfully")
    token: str = Field(description="Access token valid for the registration TTL")
    user: UserSummary


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str

    model_config = _camel


class LoginResponse(TokenPairResponse):
    message: str = Field(default="Login successful")
    user: UserSummary
