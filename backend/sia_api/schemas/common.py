"""
SIA API: Shared Pydantic Schemas
================================

What:  Response shapes shared by every endpoint: the error body, the
       delete/acknowledge message, the health payload, and the base class
       for stored-record responses.
How:   Record responses are built from ORM objects (`from_attributes`) and
       serialized with camelCase timestamp keys. Aliases are declared on the
       fields (with `populate_by_name`) so a response can be validated both
       from ORM attributes and from its own serialized form.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Upper bound of the Integer columns (int4 on Postgres).
MAX_INT32 = 2**31 - 1


class RecordResponse(BaseModel):
    """Fields every stored record exposes: `id`, `createdAt`, `updatedAt`."""

    id: uuid.UUID = Field(description="Record identifier (UUID4)")
    created_at: datetime = Field(alias="createdAt", description="Creation time (UTC)")
    updated_at: datetime = Field(alias="updatedAt", description="Last replacement time (UTC)")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. `{"message": "Role deleted successfully"}`."""

    message: str


class ErrorResponse(BaseModel):
    """
    What:  The one error format returned by every failing request.

    Fields:
        error: Machine-readable code (e.g. "validation_error", "not_found")
        message: Human-readable description, safe to display
        details: Extra context; for validation failures always
                 `{"errors": [{"field": ..., "message": ...}]}`
        request_id: Correlation ID for finding this request in server logs

    Example:
        {
            "error": "unauthorized",
            "message": "Token has expired",
            "details": null,
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitors and load balancers."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since the app was created")
