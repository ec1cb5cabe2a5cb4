from fastapi import APIRouter
from notifier.modules.notifications.router import router as notifications_router
from notifier.modules.campaigns.router import router as campaigns_router
from notifier.modules.webhooks.router import router as webhooks_router

api_router = APIRouter()
api_router.include_router(notifications_router, tags=["notifications"])
api_router.include_router(campaigns_router, tags=["campaigns"])
api_router.include_router(webhooks_router, tags=["webhooks"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
