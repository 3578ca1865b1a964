"""
Credit Transaction Model
Append-only audit trail of every balance change.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index
from creditdesk.database import Base


class CreditTransaction(Base):
    """
    One row per ledger adjustment.
    Invariant: new_balance == max(0, previous_balance + amount).
    """
    __tablename__ = "credit_transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Integer, nullable=False)  # positive credits, negative debits
    previous_balance = Column(Integer, nullable=False)
    new_balance = Column(Integer, nullable=False)
    note = Column(Text, nullable=True)
    admin_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # null for self-service spending

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('ix_credit_transactions_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return (
            f"<CreditTransaction(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, {self.previous_balance}->{self.new_balance})>"
        )
