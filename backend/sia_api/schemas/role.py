"""Role request/response schemas. Wire names are snake_case as published."""

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from sia_api.schemas.common import RecordResponse


class RoleCreate(BaseModel):
    """Body for POST /api/roles and PUT /api/roles/{id} (full replacement)."""

    role_id: str = Field(min_length=1, max_length=100)
    manager: StrictBool
    casher: StrictBool
    guess_user: StrictBool

    model_config = ConfigDict(str_strip_whitespace=True)


class RoleResponse(RecordResponse):
    role_id: str
    manager: bool
    casher: bool
    guess_user: bool
