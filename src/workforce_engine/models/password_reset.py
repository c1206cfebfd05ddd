"""Password reset token model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from workforce_engine.models.base import Base, TimestampMixin


class PasswordResetToken(Base, TimestampMixin):
    """Single-use token that lets an account holder set a new password.

    A token is valid while ``used`` is false and ``expires_at`` lies in the
    future.
    """

    __tablename__ = "password_reset_token"

    token_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
