import logging
from contextvars import ContextVar
from .config import settings

# attach request_id to log records (simple)
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")

_old_factory = logging.getLogRecordFactory()

def _record_factory(*args, **kwargs):
    record = _old_factory(*args, **kwargs)
    record.request_id = request_id_ctx.get()
    return record

def setup_logging():
    level = logging.DEBUG if settings.ENV == "local" else logging.INFO
    logging.setLogRecordFactory(_record_factory)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s",
    )
