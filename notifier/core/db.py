from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from .config import settings
from .base import Base

engine = create_async_engine(settings.POSTGRES_DSN, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

def import_models():
    # registers every table on Base.metadata
    from notifier.modules.audit import models as _audit  # noqa: F401
    from notifier.modules.bookings import models as _bookings  # noqa: F401
    from notifier.modules.campaigns import models as _campaigns  # noqa: F401
    from notifier.modules.consent import models as _consent  # noqa: F401

async def init_models():
    ## In dev-only "create_all" mode create tables directly; otherwise, migrations own the schema.
    if settings.DB_MANAGE == "create_all":
        import_models()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
