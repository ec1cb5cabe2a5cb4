import logging
import uuid
from notifier.platform.ports.carrier import CarrierPort

log = logging.getLogger("carrier.noop")

class NoopCarrier(CarrierPort):
    """Local-dev carrier: logs the message and pretends it was accepted."""

    async def send_message(self, *, from_number: str, to: str, body: str) -> str:
        sid = f"NOOP{uuid.uuid4().hex}"
        log.info(f"[NOOP SMS] from={from_number} to={to} sid={sid} body={body[:50]!r}")
        return sid
