from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, JSON, Integer
from notifier.core.base import Base, TimestampedSiteMixin

# Reference data owned by the surrounding booking platform; read-only here.

class Business(Base, TimestampedSiteMixin):
    name: Mapped[str] = mapped_column(String(120))

class SiteContent(Base, TimestampedSiteMixin):
    address: Mapped[str | None] = mapped_column(String(200), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    state: Mapped[str | None] = mapped_column(String(64), nullable=True)
    zip: Mapped[str | None] = mapped_column(String(16), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    messaging_settings: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # camelCase keys, see MessagingSettings

class FleetType(Base, TimestampedSiteMixin):
    name: Mapped[str] = mapped_column(String(120))

class RentalTimeSlot(Base, TimestampedSiteMixin):
    name: Mapped[str] = mapped_column(String(120))
    start_time: Mapped[str] = mapped_column(String(16))  # "09:00"
    end_time: Mapped[str] = mapped_column(String(16))

class Customer(Base, TimestampedSiteMixin):
    name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    total_bookings: Mapped[int] = mapped_column(Integer, default=0)
