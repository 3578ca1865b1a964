from pydantic import BaseModel, Field

from creditdesk.config import settings


class AppSettings(BaseModel):
    """Runtime-editable settings. Missing values fall back to these defaults."""
    search_cost: int = Field(default_factory=lambda: settings.default_search_cost, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "search_cost": 10
            }
        }


class SearchCostResponse(BaseModel):
    search_cost: int
