from typing import Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_
from notifier.modules.consent.models import SmsOptOut

class OptOutRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, phones: Iterable[str], *, site_id: str | None = None) -> SmsOptOut | None:
        """First opt-out matching any of `phones`. With site_id, only that site's rows and all-site rows match."""
        candidates = sorted({p for p in phones if p})
        if not candidates:
            return None
        cond = [SmsOptOut.phone.in_(candidates)]
        if site_id is not None:
            cond.append(or_(SmsOptOut.site_id == site_id, SmsOptOut.site_id.is_(None)))
        q = select(SmsOptOut).where(*cond).limit(1)
        res = await self.session.execute(q)
        return res.scalars().first()

    async def add(self, phone: str, site_id: str | None = None) -> SmsOptOut:
        q = select(SmsOptOut).where(SmsOptOut.phone == phone)
        q = q.where(SmsOptOut.site_id.is_(None) if site_id is None else SmsOptOut.site_id == site_id)
        existing = (await self.session.execute(q)).scalars().first()
        if existing:
            return existing
        obj = SmsOptOut(phone=phone, site_id=site_id)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def remove_all(self, phone: str) -> int:
        res = await self.session.execute(delete(SmsOptOut).where(SmsOptOut.phone == phone))
        await self.session.flush()
        return res.rowcount or 0
