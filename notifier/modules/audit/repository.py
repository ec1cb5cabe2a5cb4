from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from notifier.modules.audit.models import SmsLog

class SmsLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, **data) -> SmsLog:
        obj = SmsLog(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def list_for_site(self, site_id: str, *, limit: int = 100) -> Sequence[SmsLog]:
        q = select(SmsLog).where(SmsLog.site_id == site_id).order_by(desc(SmsLog.created_at)).limit(limit)
        res = await self.session.execute(q)
        return res.scalars().all()

