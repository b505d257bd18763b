"""
SIA API: Revoked Refresh Token Model
====================================

What:  Denylist of refresh-token ids (`jti`) that were already exchanged.
When:  Written only when REFRESH_TOKEN_ROTATION is enabled; consulted by the
       refresh flow, never by the access guard.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from sia_api.database import Base
from sia_api.models.mixins import utcnow


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    subject_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # Rows past this instant can be purged; the token is expired anyway.
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<RevokedToken(jti='{self.jti}', subject_id='{self.subject_id}')>"
