import math
import uuid
from datetime import date, datetime
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

class Addon(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _as_text(cls, v: Any):
        return v if v is None or isinstance(v, str) else str(v)

class BookingRecord(BaseModel):
    """The booking as handed over by the booking flow. Unknown fields are ignored."""
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    booking_date: date | str | None = None
    booking_time: str | None = None
    time_slot_id: uuid.UUID | None = None
    fleet_type_id: uuid.UUID | None = None
    addons: list[Addon] | None = None
    qty: int | float | None = None
    party_size: int | float | None = None
    total: float | str | None = None
    payment_status: str | None = None

    # a value that does not fit its field is coerced or dropped, never rejected

    @field_validator("id", "customer_name", "customer_phone", "customer_email", "booking_time", "payment_status",
                     mode="before")
    @classmethod
    def _as_text(cls, v: Any):
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("booking_date", mode="before")
    @classmethod
    def _as_day(cls, v: Any):
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, (date, str)):
            return v
        return None

    @field_validator("qty", "party_size", mode="before")
    @classmethod
    def _as_count(cls, v: Any):
        if isinstance(v, bool):
            return None
        try:
            n = float(v)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(n):
            return None
        return int(n) if n.is_integer() else n

    @field_validator("time_slot_id", "fleet_type_id", mode="before")
    @classmethod
    def _as_uuid(cls, v: Any):
        if v is None or isinstance(v, uuid.UUID):
            return v
        try:
            return uuid.UUID(str(v))
        except ValueError:
            return None

    @field_validator("addons", mode="before")
    @classmethod
    def _as_addons(cls, v: Any):
        if not isinstance(v, (list, tuple)):
            return None
        items = []
        for a in v:
            if isinstance(a, str):
                items.append({"name": a})
            elif isinstance(a, (dict, Addon)):
                items.append(a)
        return items

    @field_validator("total", mode="before")
    @classmethod
    def _as_amount(cls, v: Any):
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            return None
        return v

class MessagingSettings(BaseModel):
    """Per-site messaging preferences stored on SiteContent.messaging_settings."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    notify_customer_on_booking: bool = Field(True, alias="notifyCustomerOnBooking")
    notify_owner_on_booking: bool = Field(True, alias="notifyOwnerOnBooking")
    notify_customer_on_cancel: bool = Field(True, alias="notifyCustomerOnCancel")
    customer_booking_template: str | None = Field(None, alias="customerBookingTemplate")
    owner_booking_template: str | None = Field(None, alias="ownerBookingTemplate")
    customer_cancel_template: str | None = Field(None, alias="customerCancelTemplate")

    @classmethod
    def from_raw(cls, raw: Any) -> "MessagingSettings":
        return cls.model_validate(raw if isinstance(raw, dict) else {})
