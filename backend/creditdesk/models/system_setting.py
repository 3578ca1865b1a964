from sqlalchemy import Column, Integer, DateTime, String, Text
from sqlalchemy.sql import func
from creditdesk.database import Base


class SystemSetting(Base):
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(255), unique=True, index=True, nullable=False)  # e.g., "search_cost"
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
