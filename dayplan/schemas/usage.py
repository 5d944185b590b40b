from typing import List, Optional
from pydantic import BaseModel, Field


class UsageSummary(BaseModel):
    tier: str
    requests_used: int
    limit: Optional[int] = None        # None for unlimited tiers
    remaining: Optional[int] = None


class BillingEvent(BaseModel):
    type: str = ""
    app_user_id: Optional[str] = None
    entitlement_ids: Optional[List[str]] = None


class BillingWebhook(BaseModel):
    event: BillingEvent = Field(default_factory=BillingEvent)
