from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from notifier.platform.provider_registry import ProviderRegistry, get_registry
from notifier.modules.campaigns.schemas import CampaignCreate, CampaignLaunched, CampaignOut
from notifier.modules.campaigns.service import CampaignService

router = APIRouter()

_ERRORS = {
    "message_required": "Message required",
    "no_recipients": "No customers with phone numbers found",
}

def svc(registry: ProviderRegistry = Depends(get_registry)) -> CampaignService:
    return CampaignService(registry.session_factory, registry.dispatcher(), registry.settings.CAMPAIGN_CONCURRENCY)

@router.post("/sites/{site_id}/sms/campaign", response_model=CampaignLaunched)
async def launch_campaign(
    site_id: str,
    payload: CampaignCreate,
    background: BackgroundTasks,
    service: CampaignService = Depends(svc),
):
    try:
        plan = await service.create(site_id, payload)
    except ValueError as e:
        if str(e) in _ERRORS:
            raise HTTPException(400, _ERRORS[str(e)])
        raise
    # sending continues after the response is returned
    background.add_task(service.run, site_id, plan)
    return CampaignLaunched(campaign_id=plan.campaign_id, recipient_count=len(plan.recipients))

@router.get("/sites/{site_id}/sms/campaigns", response_model=list[CampaignOut])
async def list_campaigns(site_id: str, service: CampaignService = Depends(svc)):
    return await service.list(site_id)
