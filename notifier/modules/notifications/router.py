from fastapi import APIRouter, Depends, Query
from notifier.platform.provider_registry import ProviderRegistry, get_registry
from notifier.modules.bookings.schemas import BookingRecord
from notifier.modules.notifications.schemas import DispatchResultOut, SmsLogOut
from notifier.modules.notifications.service import BookingNotifier

router = APIRouter()

def svc(registry: ProviderRegistry = Depends(get_registry)) -> BookingNotifier:
    return BookingNotifier(registry.session_factory, registry.dispatcher(), registry.context_builder())

@router.post("/sites/{site_id}/notifications/booking-created", response_model=list[DispatchResultOut])
async def booking_created(site_id: str, booking: BookingRecord, service: BookingNotifier = Depends(svc)):
    return await service.booking_created(site_id, booking)

@router.post("/sites/{site_id}/notifications/booking-cancelled", response_model=list[DispatchResultOut])
async def booking_cancelled(site_id: str, booking: BookingRecord, service: BookingNotifier = Depends(svc)):
    return await service.booking_cancelled(site_id, booking)

@router.get("/sites/{site_id}/sms-log", response_model=list[SmsLogOut])
async def sms_log(
    site_id: str,
    limit: int = Query(100, ge=1, le=200),
    registry: ProviderRegistry = Depends(get_registry),
):
    return await registry.audit_logger().list_for_site(site_id, limit=limit)
