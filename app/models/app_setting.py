# app/models/app_setting.py
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, JSON
from app.db.base import Base


def utcnow():
    return datetime.now(timezone.utc)


class AppSetting(Base):
    __tablename__ = "app_settings"

    id = Column(Text, primary_key=True)
    value = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
