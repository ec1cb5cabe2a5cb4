import logging
from dataclasses import dataclass
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from twilio.twiml.messaging_response import MessagingResponse
from notifier.modules.audit.service import AuditLogger
from notifier.modules.bookings.repository import ReferenceRepository
from notifier.modules.consent.repository import OptOutRepository

log = logging.getLogger("sms.inbound")

STOP_KEYWORDS = frozenset({"STOP", "UNSUBSCRIBE", "CANCEL", "QUIT", "END"})
START_KEYWORDS = frozenset({"START"})

UNSUBSCRIBED_REPLY = "You have been unsubscribed. Reply START to resubscribe."
RESUBSCRIBED_REPLY = "You have been resubscribed and will receive messages again."

@dataclass(frozen=True)
class InboundOutcome:
    action: str  # opted_out | opted_in | logged | ignored
    site_id: str | None = None
    reply: str | None = None

    def twiml(self) -> str:
        resp = MessagingResponse()
        if self.reply:
            resp.message(self.reply)
        return str(resp)

class InboundMessageService:
    """
    Handles texts arriving on the shared sender number.

    STOP-style keywords opt the sender out of every site, START opts them back in,
    anything else is logged against the site whose contact number was texted.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], audit: AuditLogger):
        self.session_factory = session_factory
        self.audit = audit

    async def handle(self, from_phone: str | None, to_phone: str | None, body: str | None,
                     status: str | None, message_sid: str | None = None) -> InboundOutcome:
        """Never raises: a failed write is logged and the TwiML reply is still returned."""
        if status != "received" or not body or not from_phone:
            return InboundOutcome("ignored")

        keyword = body.strip().upper()
        if keyword in STOP_KEYWORDS:
            try:
                async with self.session_factory() as session:
                    await OptOutRepository(session).add(from_phone, site_id=None)
                    await session.commit()
                log.info("Opt-out recorded for %s", from_phone)
            except Exception as e:
                log.warning("Opt-out write failed for %s: %s", from_phone, e)
            await self.audit.record(None, from_phone, body, "opt_out", "received")
            return InboundOutcome("opted_out", reply=UNSUBSCRIBED_REPLY)

        if keyword in START_KEYWORDS:
            try:
                async with self.session_factory() as session:
                    removed = await OptOutRepository(session).remove_all(from_phone)
                    await session.commit()
                log.info("Opt-out cleared for %s (%d rows)", from_phone, removed)
            except Exception as e:
                log.warning("Opt-out removal failed for %s: %s", from_phone, e)
            return InboundOutcome("opted_in", reply=RESUBSCRIBED_REPLY)

        site_id = None
        if to_phone:
            try:
                async with self.session_factory() as session:
                    content = await ReferenceRepository(session).site_by_contact_phone(to_phone)
                    site_id = content.site_id if content else None
            except Exception as e:
                log.warning("Site lookup failed for inbound text to %s: %s", to_phone, e)
        if site_id is None:
            return InboundOutcome("ignored")

        meta = {"from": from_phone}
        if message_sid:
            meta["message_sid"] = message_sid
        await self.audit.record(site_id, to_phone, body, "incoming", "received", meta=meta)
        return InboundOutcome("logged", site_id=site_id)
