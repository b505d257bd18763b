"""
SIA API: Account SQLAlchemy Model
=================================

What:  ORM model for the `users` table (the credential store).
How:   One row per registered identity. `email` is unique at the database
       level; the password is stored only as a bcrypt digest.

Lifecycle:
    Created by POST /api/auth/register or POST /api/users.
    Replaced by PUT /api/users/{id}; removed by DELETE /api/users/{id}.
    Tokens issued before a delete stay signature-valid, but refresh fails
    with 404 once the row is gone.
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from sia_api.database import Base
from sia_api.models.mixins import RecordMixin


class Account(RecordMixin, Base):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email='{self.email}')>"
