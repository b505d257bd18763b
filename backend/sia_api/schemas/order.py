"""Order request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from sia_api.schemas.common import MAX_INT32, RecordResponse


class OrderCreate(BaseModel):
    """
    `order_id` is the caller's own order number (unique), distinct from the
    generated record `id` used in URLs.
    """

    order_id: StrictInt = Field(ge=1, le=MAX_INT32)
    order_name: str = Field(min_length=1, max_length=100)
    number_of_items: StrictInt = Field(ge=1, le=MAX_INT32)

    model_config = ConfigDict(str_strip_whitespace=True)


class OrderResponse(RecordResponse):
    order_id: int
    order_name: str
    number_of_items: int
