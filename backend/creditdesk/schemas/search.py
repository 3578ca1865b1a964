import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from creditdesk.models.search import Search
from creditdesk.services.search_service import SearchStatus, display_status


class SearchCreate(BaseModel):
    address: str = Field(..., min_length=1)
    segment: str = Field(..., min_length=1, max_length=75)
    cep: Optional[str] = None

    @field_validator("cep")
    @classmethod
    def validate_cep(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        digits = re.sub(r"\D", "", v)
        if not digits:
            return None
        if len(digits) != 8:
            raise ValueError("CEP must have 8 digits")
        return digits


class SearchResponse(BaseModel):
    id: int
    search_id: str
    user_id: int
    address: str
    segment: str
    cep: Optional[str] = None
    credits_used: int
    finalizado: bool
    status: SearchStatus
    created_at: datetime

    @classmethod
    def from_model(cls, search: Search, now: Optional[datetime] = None) -> "SearchResponse":
        return cls(
            id=search.id,
            search_id=search.search_id,
            user_id=search.user_id,
            address=search.address,
            segment=search.segment,
            cep=search.cep,
            credits_used=search.credits_used,
            finalizado=search.finalizado,
            status=display_status(search, now),
            created_at=search.created_at,
        )
