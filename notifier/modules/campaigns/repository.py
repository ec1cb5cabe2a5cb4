import uuid
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from notifier.modules.campaigns.models import SmsCampaign

class CampaignRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, site_id: str, **data) -> SmsCampaign:
        obj = SmsCampaign(site_id=site_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, site_id: str, campaign_id: uuid.UUID) -> SmsCampaign | None:
        q = select(SmsCampaign).where(
            SmsCampaign.id == campaign_id,
            SmsCampaign.site_id == site_id,
            SmsCampaign.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list(self, site_id: str, *, limit: int = 50) -> Sequence[SmsCampaign]:
        q = select(SmsCampaign).where(
            SmsCampaign.site_id == site_id,
            SmsCampaign.deleted_at.is_(None),
        ).order_by(desc(SmsCampaign.created_at)).limit(limit)
        res = await self.session.execute(q)
        return res.scalars().all()
