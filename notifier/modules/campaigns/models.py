from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Integer
from notifier.core.base import Base, TimestampedSiteMixin

class SmsCampaign(Base, TimestampedSiteMixin):
    audience: Mapped[str] = mapped_column(String(16), default="all")  # all | vip | inactive
    message: Mapped[str] = mapped_column(Text)
    coupon_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    recipient_count: Mapped[int] = mapped_column(Integer, default=0)
    sent_count: Mapped[int] = mapped_column(Integer, default=0)
    failed_count: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(16), default="sending")  # sending | completed
