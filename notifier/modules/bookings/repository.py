import uuid
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from notifier.modules.bookings.models import Business, SiteContent, FleetType, RentalTimeSlot, Customer

class ReferenceRepository:
    """Site-scoped reads of business, address, fleet and time-slot records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def business(self, site_id: str) -> Business | None:
        q = select(Business).where(Business.site_id == site_id, Business.deleted_at.is_(None)).limit(1)
        res = await self.session.execute(q)
        return res.scalars().first()

    async def site_content(self, site_id: str) -> SiteContent | None:
        q = select(SiteContent).where(SiteContent.site_id == site_id, SiteContent.deleted_at.is_(None)).limit(1)
        res = await self.session.execute(q)
        return res.scalars().first()

    async def site_by_contact_phone(self, phone: str) -> SiteContent | None:
        q = select(SiteContent).where(SiteContent.contact_phone == phone, SiteContent.deleted_at.is_(None)).limit(1)
        res = await self.session.execute(q)
        return res.scalars().first()

    async def fleet_type(self, site_id: str, fleet_type_id: uuid.UUID) -> FleetType | None:
        q = select(FleetType).where(
            FleetType.id == fleet_type_id,
            FleetType.site_id == site_id,
            FleetType.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def time_slot(self, site_id: str, slot_id: uuid.UUID) -> RentalTimeSlot | None:
        q = select(RentalTimeSlot).where(
            RentalTimeSlot.id == slot_id,
            RentalTimeSlot.site_id == site_id,
            RentalTimeSlot.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()


class CustomerRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_with_phone(self, site_id: str, *, audience: str = "all") -> Sequence[Customer]:
        cond = [Customer.site_id == site_id, Customer.deleted_at.is_(None), Customer.phone.is_not(None)]
        if audience == "vip":
            cond.append(Customer.total_bookings >= 3)
        elif audience == "inactive":
            cond.append(Customer.total_bookings == 0)
        q = select(Customer).where(*cond).order_by(Customer.created_at.asc())
        res = await self.session.execute(q)
        return res.scalars().all()
