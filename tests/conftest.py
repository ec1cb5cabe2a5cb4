"""
Shared fixtures: an in-memory SQLite database per test and a scripted carrier double.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from notifier.core.base import Base
from notifier.core.db import import_models
from notifier.modules.audit.service import AuditLogger
from notifier.modules.audit.repository import SmsLogRepository
from notifier.modules.consent.service import ConsentGate
from notifier.modules.dispatch.service import SmsDispatcher, RetryPolicy

SENDER = "+15550001111"


class FakeCarrier:
    """Records every send; raises queued errors first, then returns `sid`."""

    def __init__(self, sid: str = "SM0001", errors: list[Exception] | None = None):
        self.sid = sid
        self.errors = list(errors or [])
        self.calls: list[dict] = []

    async def send_message(self, *, from_number: str, to: str, body: str) -> str:
        self.calls.append({"from_number": from_number, "to": to, "body": body})
        if self.errors:
            raise self.errors.pop(0)
        return self.sid


def broken_session_factory():
    raise ConnectionError("database unavailable")


@pytest.fixture
async def engine():
    import_models()
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
def seed(session_factory):
    async def _seed(*objs):
        async with session_factory() as session:
            session.add_all(objs)
            await session.commit()
        return objs
    return _seed


@pytest.fixture
def sms_logs(session_factory):
    async def _logs(site_id: str):
        async with session_factory() as session:
            return list(await SmsLogRepository(session).list_for_site(site_id))
    return _logs


@pytest.fixture
def carrier() -> FakeCarrier:
    return FakeCarrier()


@pytest.fixture
def make_dispatcher(session_factory, carrier):
    def _make(*, carrier=carrier, sender=SENDER, scope="global", on_lookup_failure="closed",
              retry: RetryPolicy | None = None, consent_factory=None, audit_factory=None):
        return SmsDispatcher(
            carrier,
            sender,
            ConsentGate(consent_factory or session_factory, scope=scope, on_lookup_failure=on_lookup_failure),
            AuditLogger(audit_factory or session_factory),
            retry=retry,
        )
    return _make


@pytest.fixture
def dispatcher(make_dispatcher) -> SmsDispatcher:
    return make_dispatcher()
