import time
import uuid
import logging
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from notifier.core.config import settings
from notifier.core.logging import setup_logging, request_id_ctx
from notifier.core.db import init_models, SessionLocal, engine
from notifier.api.router import api_router
from notifier.platform.provider_registry import ProviderRegistry

setup_logging()
app = FastAPI(title=settings.APP_NAME)
logger = logging.getLogger(__name__)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000
    logger.info(
        f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {process_time:.2f}ms"
    )
    return response

# registered last so it runs first and the request log line carries the id
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    request_id_ctx.set(rid)
    response = await call_next(request)
    response.headers["x-request-id"] = rid
    return response

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "An internal server error occurred."},
    )

@app.on_event("startup")
async def on_startup():
    await init_models()
    app.state.registry = ProviderRegistry(settings, SessionLocal)
    if app.state.registry.carrier() is None or not settings.TWILIO_PHONE_NUMBER:
        logger.warning("SMS carrier not configured; messages will be logged as not_configured")

@app.on_event("shutdown")
async def on_shutdown():
    await engine.dispose()


app.include_router(api_router, prefix=settings.API_PREFIX)
