"""Application setting model backing the per-job retry policy."""
from uuid import uuid4
from typing import Optional
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column
from batchsmith.core.database import Base
from batchsmith.models.base import TimestampMixin


class AppSetting(Base, TimestampMixin):
    """Key/value application setting, stored as text."""

    __tablename__ = "app_settings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    setting_type: Mapped[str] = mapped_column(String(20), nullable=False, default="string")
    category: Mapped[str] = mapped_column(
        String(50), nullable=False, default="general", index=True
    )

    def __repr__(self) -> str:
        """Return string representation of AppSetting."""
        return f"<AppSetting(key={self.key}, value={self.value})>"
