"""
SIA API: Transaction Schemas
============================

What:  Request/response models for /api/transaction.
How:   Every field travels as camelCase (`transactionId`, `productId`, ...).
       `populate_by_name` also accepts the snake_case attribute names, which
       lets responses validate straight from ORM objects.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from sia_api.schemas.common import MAX_INT32, RecordResponse

TransactionType = Literal["purchase", "sale"]


class TransactionCreate(BaseModel):
    transaction_id: str = Field(min_length=1, max_length=100)
    product_id: str = Field(min_length=1, max_length=100)
    inventory_id: str = Field(min_length=1, max_length=100)
    order_id: str = Field(min_length=1, max_length=100)
    transaction_type: TransactionType
    transaction_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    quantity: StrictInt = Field(ge=1, le=MAX_INT32)
    payment: float = Field(ge=0, allow_inf_nan=False)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @field_validator("transaction_date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive datetimes are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class TransactionResponse(RecordResponse):
    transaction_id: str
    product_id: str
    inventory_id: str
    order_id: str
    transaction_type: TransactionType
    transaction_date: datetime
    quantity: int
    payment: float

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
