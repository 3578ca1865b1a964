from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, StrictInt


class CreditAdjustment(BaseModel):
    """Signed amount: positive adds credits, negative removes them."""
    amount: StrictInt
    note: Optional[str] = Field(None, max_length=500)


class CreditLimitUpdate(BaseModel):
    limit: StrictInt


class CreditTransactionResponse(BaseModel):
    id: int
    user_id: int
    amount: int
    previous_balance: int
    new_balance: int
    note: Optional[str] = None
    admin_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
