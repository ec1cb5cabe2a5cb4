import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict

class DispatchResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    success: bool
    reason: str | None = None
    message_id: str | None = None
    audit_written: bool = True

class SmsLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    site_id: str | None
    to_phone: str
    message: str
    type: str
    status: str
    related_id: str | None
    meta: dict | None = None
    created_at: datetime
