import logging
from dataclasses import dataclass
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from notifier.modules.audit.models import SmsLog
from notifier.modules.audit.repository import SmsLogRepository
from notifier.modules.dispatch.errors import AuditWriteFailure

log = logging.getLogger("sms.audit")

@dataclass(frozen=True)
class AuditWriteResult:
    ok: bool
    error: AuditWriteFailure | None = None

class AuditLogger:
    """Append-only SMS log. Each record() commits in its own session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(self,
                     site_id: str | None,
                     to_phone: str,
                     message: str,
                     type: str,
                     status: str,
                     related_id: str | None = None,
                     meta: dict | None = None) -> AuditWriteResult:
        # Best-effort: a lost row is reported, never raised, so it can't turn a delivered message into a failure.
        try:
            async with self.session_factory() as session:
                await SmsLogRepository(session).append(
                    site_id=site_id,
                    to_phone=to_phone or "",
                    message=message or "",
                    type=type,
                    status=status,
                    related_id=str(related_id) if related_id is not None else None,
                    meta=meta or {},
                )
                await session.commit()
        except Exception as e:
            log.warning("SMS log write failed site=%s status=%s: %s", site_id, status, e)
            return AuditWriteResult(ok=False, error=AuditWriteFailure(str(e)))
        return AuditWriteResult(ok=True)

    async def list_for_site(self, site_id: str, limit: int = 100) -> Sequence[SmsLog]:
        async with self.session_factory() as session:
            return await SmsLogRepository(session).list_for_site(site_id, limit=limit)
