"""Administrator model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from markscard.core.database import Base
from markscard.models.base import IDMixin, TimestampMixin


class Admin(Base, IDMixin, TimestampMixin):
    """Administrator account. Only a bcrypt hash of the password is stored."""

    __tablename__ = "admins"

    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, username={self.username})>"
