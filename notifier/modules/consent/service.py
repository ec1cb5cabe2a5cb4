import logging
from dataclasses import dataclass
from typing import Literal
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from notifier.modules.consent.repository import OptOutRepository

log = logging.getLogger("sms.consent")

OptOutScope = Literal["global", "site"]
LookupFailurePolicy = Literal["closed", "open"]

@dataclass(frozen=True)
class ConsentDecision:
    suppressed: bool
    lookup_failed: bool = False

class ConsentGate:
    """
    Opt-out check run after the recipient is normalized and before the carrier is called.

    scope="global": any opt-out row for the phone suppresses the send.
    scope="site":   only rows for the dispatching site, or rows that cover every site.

    on_lookup_failure decides what a registry outage means: "closed" suppresses,
    "open" lets the message through. check() itself never raises.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        scope: OptOutScope = "global",
        on_lookup_failure: LookupFailurePolicy = "closed",
    ):
        self.session_factory = session_factory
        self.scope = scope
        self.on_lookup_failure = on_lookup_failure

    async def check(self, site_id: str, raw: str, normalized: str | None) -> ConsentDecision:
        try:
            async with self.session_factory() as session:
                hit = await OptOutRepository(session).find(
                    [raw, normalized],
                    site_id=site_id if self.scope == "site" else None,
                )
        except Exception as e:
            log.warning(
                "Opt-out lookup failed for site=%s; failing %s: %s",
                site_id, self.on_lookup_failure, e,
            )
            return ConsentDecision(suppressed=self.on_lookup_failure == "closed", lookup_failed=True)
        return ConsentDecision(suppressed=hit is not None)

    async def is_opted_out(self, site_id: str, raw: str, normalized: str | None) -> bool:
        return (await self.check(site_id, raw, normalized)).suppressed
