from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON
from notifier.core.base import Base, SiteScopedMixin

class SmsLog(Base, SiteScopedMixin):
    # NULL only for inbound opt-outs on the shared number
    site_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    to_phone: Mapped[str] = mapped_column(String(32))
    message: Mapped[str] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(32))    # booking_confirmation | booking_owner_notify | campaign | cancellation | ... | opt_out | incoming
    status: Mapped[str] = mapped_column(String(24))  # not_configured | invalid_phone | opted_out | sent | failed | received
    related_id: Mapped[str | None] = mapped_column(String(64), nullable=True)  # booking or campaign id
    meta: Mapped[dict] = mapped_column("metadata", JSON, default=dict)  # {"carrier_message_id": ...}
