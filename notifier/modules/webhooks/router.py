import logging
from fastapi import APIRouter, Depends, Request, Response
from notifier.platform.provider_registry import ProviderRegistry, get_registry
from notifier.modules.webhooks.service import InboundMessageService

router = APIRouter()
logger = logging.getLogger(__name__)

def svc(registry: ProviderRegistry = Depends(get_registry)) -> InboundMessageService:
    return InboundMessageService(registry.session_factory, registry.audit_logger())

@router.post("/webhooks/twilio")
async def twilio_webhook(request: Request, service: InboundMessageService = Depends(svc)):
    """Twilio message events (inbound texts). Always answers with TwiML so Twilio doesn't retry."""
    form = await request.form()
    logger.info(f"Twilio webhook: {form.get('SmsStatus')} from {form.get('From')}")
    outcome = await service.handle(
        from_phone=form.get("From"),
        to_phone=form.get("To"),
        body=form.get("Body"),
        status=form.get("SmsStatus"),
        message_sid=form.get("MessageSid"),
    )
    return Response(content=outcome.twiml(), media_type="application/xml")
