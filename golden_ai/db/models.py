"""
SQLAlchemy ORM models.

Only the key/value settings table belongs to this service; posts,
categories and tags live in the CMS database and reach the AI helpers as
plain request data.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from golden_ai.db.database import Base


class SettingModel(Base):
    """One site setting (ai_profiles, ai_model, company_name, ...)."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
