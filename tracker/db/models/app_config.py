from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from .base import Base, now_utc


class AppConfig(Base):
    __tablename__ = 'app_config'
    key = Column(String, primary_key=True)
    value = Column(JSONB, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)
