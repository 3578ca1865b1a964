"""
Search Model
Records each lookup submitted to the external search provider.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index
from creditdesk.database import Base


class Search(Base):
    """
    A submitted search. ``finalizado`` is the only column updated after insert.
    """
    __tablename__ = "searches"

    id = Column(Integer, primary_key=True, index=True)
    search_id = Column(String(255), nullable=False)  # ID returned by the provider
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    address = Column(Text, nullable=False)
    segment = Column(Text, nullable=False)
    cep = Column(String(8), nullable=True)
    credits_used = Column(Integer, nullable=False)
    finalizado = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('ix_searches_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Search(id={self.id}, search_id='{self.search_id}', finalizado={self.finalizado})>"
