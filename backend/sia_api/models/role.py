"""SIA API: Role model (`roles` table), unique on `role_id`."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from sia_api.database import Base
from sia_api.models.mixins import RecordMixin


class Role(RecordMixin, Base):
    __tablename__ = "roles"

    role_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    manager: Mapped[bool] = mapped_column(Boolean, nullable=False)
    casher: Mapped[bool] = mapped_column(Boolean, nullable=False)
    guess_user: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, role_id='{self.role_id}')>"
