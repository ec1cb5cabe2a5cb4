import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from notifier.modules.bookings.repository import ReferenceRepository, CustomerRepository
from notifier.modules.campaigns.models import SmsCampaign
from notifier.modules.campaigns.repository import CampaignRepository
from notifier.modules.campaigns.schemas import CampaignCreate
from notifier.modules.dispatch.service import SmsDispatcher
from notifier.modules.messaging.templates import TemplateKind, TokenContext, Token, render_template

log = logging.getLogger("sms.campaigns")

@dataclass(frozen=True)
class Recipient:
    name: str | None
    phone: str

@dataclass
class CampaignPlan:
    campaign_id: uuid.UUID
    business_name: str
    message: str
    coupon_code: str | None
    recipients: list[Recipient] = field(default_factory=list)

def compose_campaign_message(message: str, business_name: str, customer_name: str | None,
                             coupon_code: str | None) -> str:
    body = f"[{business_name}] " + render_template(message, TokenContext({Token.CUSTOMER_NAME: customer_name or "there"}))
    if coupon_code:
        body += f"\n\nUse code {coupon_code} at checkout!"
    body += "\n\nReply STOP to unsubscribe."
    return body

class CampaignService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], dispatcher: SmsDispatcher,
                 concurrency: int = 5):
        self.session_factory = session_factory
        self.dispatcher = dispatcher
        self.concurrency = max(1, concurrency)

    async def create(self, site_id: str, payload: CampaignCreate) -> CampaignPlan:
        if not payload.message:
            raise ValueError("message_required")
        async with self.session_factory() as session:
            customers = await CustomerRepository(session).list_with_phone(site_id, audience=payload.audience)
            if not customers:
                raise ValueError("no_recipients")
            business = await ReferenceRepository(session).business(site_id)
            campaign = await CampaignRepository(session).create(
                site_id,
                audience=payload.audience,
                message=payload.message,
                coupon_code=payload.coupon_code,
                recipient_count=len(customers),
                status="sending",
            )
            plan = CampaignPlan(
                campaign_id=campaign.id,
                business_name=(business.name if business else "") or "",
                message=payload.message,
                coupon_code=payload.coupon_code,
                recipients=[Recipient(c.name, c.phone) for c in customers],
            )
            await session.commit()
        log.info("Campaign %s created for site=%s with %d recipients", plan.campaign_id, site_id, len(plan.recipients))
        return plan

    async def run(self, site_id: str, plan: CampaignPlan) -> SmsCampaign | None:
        """Send to every recipient (bounded concurrency), then store the counters."""
        sem = asyncio.Semaphore(self.concurrency)

        async def one(r: Recipient) -> bool:
            async with sem:
                body = compose_campaign_message(plan.message, plan.business_name, r.name, plan.coupon_code)
                result = await self.dispatcher.send(r.phone, body, site_id, TemplateKind.CAMPAIGN, str(plan.campaign_id))
                return result.success

        outcomes = await asyncio.gather(*(one(r) for r in plan.recipients))
        sent = sum(1 for ok in outcomes if ok)

        async with self.session_factory() as session:
            campaign = await CampaignRepository(session).get(site_id, plan.campaign_id)
            if not campaign:
                log.warning("Campaign %s vanished before completion", plan.campaign_id)
                return None
            campaign.sent_count = sent
            campaign.failed_count = len(outcomes) - sent
            campaign.status = "completed"
            await session.commit()
        log.info("Campaign %s completed: sent=%d failed=%d", plan.campaign_id, sent, len(outcomes) - sent)
        return campaign

    async def list(self, site_id: str, limit: int = 50):
        async with self.session_factory() as session:
            return await CampaignRepository(session).list(site_id, limit=limit)
