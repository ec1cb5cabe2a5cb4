import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

class CampaignCreate(BaseModel):
    audience: str = Field("all", pattern="^(all|vip|inactive)$")
    message: str | None = None
    coupon_code: str | None = None

class CampaignLaunched(BaseModel):
    success: bool = True
    campaign_id: uuid.UUID
    recipient_count: int

class CampaignOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    site_id: str
    audience: str
    message: str
    coupon_code: str | None
    recipient_count: int
    sent_count: int
    failed_count: int
    status: str
    created_at: datetime
