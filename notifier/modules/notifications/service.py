import logging
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from notifier.modules.bookings.context import ContextBuilder
from notifier.modules.bookings.repository import ReferenceRepository
from notifier.modules.bookings.schemas import BookingRecord, MessagingSettings
from notifier.modules.dispatch.service import SmsDispatcher, DispatchResult
from notifier.modules.messaging.templates import TemplateKind, DEFAULT_TEMPLATES, render_template

log = logging.getLogger("sms.notifications")

class BookingNotifier:
    """Booking lifecycle texts: confirmation to the customer, heads-up to the owner, cancellation notice."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], dispatcher: SmsDispatcher,
                 context_builder: ContextBuilder):
        self.session_factory = session_factory
        self.dispatcher = dispatcher
        self.context_builder = context_builder

    async def _site_settings(self, site_id: str) -> tuple[MessagingSettings, str | None]:
        try:
            async with self.session_factory() as session:
                content = await ReferenceRepository(session).site_content(site_id)
                if not content:
                    return MessagingSettings(), None
                return MessagingSettings.from_raw(content.messaging_settings), content.contact_phone
        except Exception as e:
            log.warning("Messaging settings unavailable for site=%s, using defaults: %s", site_id, e)
            return MessagingSettings(), None

    async def booking_created(self, site_id: str, booking: BookingRecord) -> list[DispatchResult]:
        prefs, owner_phone = await self._site_settings(site_id)
        context = await self.context_builder.build(booking, site_id)
        results: list[DispatchResult] = []

        if prefs.notify_customer_on_booking and booking.customer_phone:
            body = render_template(
                prefs.customer_booking_template or DEFAULT_TEMPLATES[TemplateKind.BOOKING_CONFIRMATION], context
            )
            results.append(await self.dispatcher.send(
                booking.customer_phone, body, site_id, TemplateKind.BOOKING_CONFIRMATION, booking.id
            ))

        if prefs.notify_owner_on_booking and owner_phone:
            body = render_template(
                prefs.owner_booking_template or DEFAULT_TEMPLATES[TemplateKind.BOOKING_OWNER_NOTIFY], context
            )
            results.append(await self.dispatcher.send(
                owner_phone, body, site_id, TemplateKind.BOOKING_OWNER_NOTIFY, booking.id
            ))
        return results

    async def booking_cancelled(self, site_id: str, booking: BookingRecord) -> list[DispatchResult]:
        prefs, _ = await self._site_settings(site_id)
        if not prefs.notify_customer_on_cancel or not booking.customer_phone:
            return []
        context = await self.context_builder.build(booking, site_id)
        body = render_template(prefs.customer_cancel_template or DEFAULT_TEMPLATES[TemplateKind.CANCELLATION], context)
        return [await self.dispatcher.send(booking.customer_phone, body, site_id, TemplateKind.CANCELLATION, booking.id)]
