"""SIA API: Order model (`orders` table), unique on `order_id`."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from sia_api.database import Base
from sia_api.models.mixins import RecordMixin


class Order(RecordMixin, Base):
    __tablename__ = "orders"

    order_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    order_name: Mapped[str] = mapped_column(String(100), nullable=False)
    number_of_items: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, order_id={self.order_id})>"
