"""Permission request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from sia_api.schemas.common import RecordResponse


class PermissionCreate(BaseModel):
    token_id: str = Field(min_length=1, max_length=100)
    manager: StrictBool
    casher: StrictBool
    guess_user: StrictBool

    model_config = ConfigDict(str_strip_whitespace=True)


class PermissionResponse(RecordResponse):
    token_id: str
    manager: bool
    casher: bool
    guess_user: bool
