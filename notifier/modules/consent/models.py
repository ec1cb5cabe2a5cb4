from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, UniqueConstraint
from notifier.core.base import Base, SiteScopedMixin

class SmsOptOut(Base, SiteScopedMixin):
    __table_args__ = (UniqueConstraint("phone", "site_id", name="uq_smsoptout_phone_site"),)

    # NULL = opted out of every site sharing the sender number
    site_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    phone: Mapped[str] = mapped_column(String(32), index=True)  # stored as received (raw or E.164)
