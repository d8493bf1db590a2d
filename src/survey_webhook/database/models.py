"""SQLAlchemy database models for persisted webhook settings."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class PluginSetting(Base):
    """A setting value, either global or scoped to a single survey."""

    __tablename__ = "plugin_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    scope: Mapped[str] = mapped_column(String(16), nullable=False)  # global/survey
    # 0 for global settings so the unique index also covers them
    scope_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    value: Mapped[Optional[str]] = mapped_column(Text)  # JSON-encoded
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_plugin_settings_unique", "name", "scope", "scope_id", unique=True),
        Index("idx_plugin_settings_scope", "scope", "scope_id"),
    )
