import logging
from datetime import date, datetime, time
from typing import Any, Awaitable, Callable, Mapping, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from notifier.modules.bookings.repository import ReferenceRepository
from notifier.modules.bookings.schemas import BookingRecord
from notifier.modules.messaging.templates import Token, TokenContext

log = logging.getLogger("sms.context")

T = TypeVar("T")

# English names regardless of process locale
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = ("January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December")

def format_booking_date(value: date | str | None) -> str:
    """'2024-07-04' -> 'Thursday, July 4, 2024'. Empty or unparseable -> ''."""
    if not value:
        return ""
    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    else:
        try:
            day = date.fromisoformat(str(value).strip()[:10])
        except ValueError:
            log.warning("Unparseable booking_date %r", value)
            return ""
    # anchored at noon so no UTC offset can move it to a neighbouring day
    noon = datetime.combine(day, time(12, 0))
    return f"{_WEEKDAYS[noon.weekday()]}, {_MONTHS[noon.month - 1]} {noon.day}, {noon.year}"

def format_total(value: Any) -> str:
    if not value:
        return "0.00"
    try:
        return f"{float(value):.2f}"
    except (TypeError, ValueError):
        return "0.00"

def format_addons(addons: list | None) -> str:
    names = [a.name or "" for a in addons or []]
    return ", ".join(names) if names else "None"

class ContextBuilder:
    """
    Assembles the token context for one booking.

    Every related record (business, address, fleet type, time slot) is looked up on its own,
    scoped to site_id. A missing or failing lookup falls back to its default instead of aborting.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def build(self, booking: BookingRecord | Mapping[str, Any], site_id: str) -> TokenContext:
        if not isinstance(booking, BookingRecord):
            booking = BookingRecord.model_validate(dict(booking))

        try:
            business, address, boat_type, slot = await self._related(booking, site_id)
        except Exception as e:
            log.warning("Reference data unavailable for site=%s, using defaults: %s", site_id, e)
            business = address = boat_type = slot = None

        return TokenContext({
            Token.CUSTOMER_NAME: booking.customer_name or "",
            Token.CUSTOMER_PHONE: booking.customer_phone or "",
            Token.CUSTOMER_EMAIL: booking.customer_email or "",
            Token.BUSINESS_NAME: business or "",
            Token.DATE: format_booking_date(booking.booking_date),
            Token.TIME_SLOT: slot or booking.booking_time or "",
            Token.BOAT_COUNT: str(booking.qty or 1),
            Token.BOAT_TYPE: boat_type or "",
            Token.ADDONS: format_addons(booking.addons),
            Token.GUEST_COUNT: str(booking.party_size or booking.qty or 1),
            Token.TOTAL: format_total(booking.total),
            Token.LOCATION: address or "",
            Token.PAYMENT_STATUS: "Paid" if booking.payment_status == "paid" else "Pending",
        })

    async def _related(self, booking: BookingRecord, site_id: str) -> tuple[str | None, ...]:
        async with self.session_factory() as session:
            repo = ReferenceRepository(session)

            async def lookup(label: str, fn: Callable[[], Awaitable[T]]) -> T | None:
                try:
                    return await fn()
                except Exception as e:
                    log.warning("Context lookup %s failed for site=%s: %s", label, site_id, e)
                    await session.rollback()
                    return None

            # each helper reads plain values out before the next lookup; a rollback expires loaded rows
            async def business_name() -> str | None:
                obj = await repo.business(site_id)
                return obj.name if obj else None

            async def location() -> str | None:
                obj = await repo.site_content(site_id)
                if not obj:
                    return None
                return ", ".join(p for p in (obj.address, obj.city, obj.state, obj.zip) if p)

            async def fleet_name() -> str | None:
                obj = await repo.fleet_type(site_id, booking.fleet_type_id)
                return obj.name if obj else None

            async def slot_label() -> str | None:
                obj = await repo.time_slot(site_id, booking.time_slot_id)
                return f"{obj.name} ({obj.start_time} - {obj.end_time})" if obj else None

            business = await lookup("business", business_name)
            address = await lookup("site_content", location)
            boat_type = await lookup("fleet_type", fleet_name) if booking.fleet_type_id else None
            slot = await lookup("time_slot", slot_label) if booking.time_slot_id else None
        return business, address, boat_type, slot
