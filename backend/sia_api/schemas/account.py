"""
SIA API: Account Schemas
========================

What:  Input and output shapes for the users resource and registration.
How:   `AccountCreate` is shared by POST /api/auth/register, POST /api/users
       and PUT /api/users/{id}. Emails are trimmed and lowercased before
       validation, so uniqueness is case-insensitive. `AccountResponse` has
       no password field at all; the digest can never be serialized.

Password limits:
    6 characters minimum, and at most 72 bytes once UTF-8 encoded. bcrypt
    only reads the first 72 bytes, so longer input is rejected instead of
    being silently truncated.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sia_api.schemas.common import RecordResponse

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PASSWORD_MAX_BYTES = 72


def normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class AccountCreate(BaseModel):
    email: str = Field(max_length=100, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=PASSWORD_MAX_BYTES)
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> Any:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
        return v


class AccountResponse(RecordResponse):
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
