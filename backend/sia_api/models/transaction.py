"""
SIA API: Transaction SQLAlchemy Model
=====================================

What:  ORM model for the `transactions` table.
How:   `product_id`, `inventory_id` and `order_id` are plain identifiers;
       nothing checks that the referenced records exist.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from sia_api.database import Base
from sia_api.models.mixins import RecordMixin, utcnow


class Transaction(RecordMixin, Base):
    __tablename__ = "transactions"

    transaction_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    product_id: Mapped[str] = mapped_column(String(100), nullable=False)
    inventory_id: Mapped[str] = mapped_column(String(100), nullable=False)
    order_id: Mapped[str] = mapped_column(String(100), nullable=False)
    # 'purchase' | 'sale'
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    payment: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, transaction_id='{self.transaction_id}', "
            f"type='{self.transaction_type}')>"
        )
