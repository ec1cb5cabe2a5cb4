import asyncio
import logging
from dataclasses import dataclass
from notifier.modules.audit.service import AuditLogger
from notifier.modules.consent.service import ConsentGate
from notifier.modules.dispatch.errors import (
    DispatchStatus, DispatchError, ConfigurationMissing, InvalidRecipient,
    ConsentSuppressed, CarrierFailure,
)
from notifier.modules.messaging.phone import normalize_phone
from notifier.modules.messaging.templates import TemplateKind
from notifier.platform.ports.carrier import CarrierPort, CarrierError

log = logging.getLogger("sms.dispatch")

@dataclass(frozen=True)
class DispatchResult:
    status: DispatchStatus
    success: bool
    reason: str | None = None
    message_id: str | None = None
    audit_written: bool = True

@dataclass(frozen=True)
class RetryPolicy:
    """
    Wraps the carrier call of a single dispatch attempt.

    Only errors the carrier flags as transient are retried. A timeout is not retried:
    the provider may already have accepted the message.
    """
    max_attempts: int = 1
    timeout_seconds: float = 10.0
    backoff_base_seconds: float = 0.5
    backoff_cap_seconds: float = 8.0

    def backoff(self, attempt: int) -> float:
        return min(self.backoff_cap_seconds, self.backoff_base_seconds * (2 ** (attempt - 1)))

class SmsDispatcher:
    def __init__(self,
                 carrier: CarrierPort | None,
                 sender_number: str | None,
                 consent: ConsentGate,
                 audit: AuditLogger,
                 *,
                 retry: RetryPolicy | None = None,
                 country_code: str = "1"):
        self.carrier = carrier
        self.sender_number = sender_number
        self.consent = consent
        self.audit = audit
        self.retry = retry or RetryPolicy()
        self.country_code = country_code

    async def send(self,
                   to: str,
                   body: str,
                   site_id: str,
                   kind: TemplateKind | str = TemplateKind.OUTGOING,
                   related_id: str | None = None) -> DispatchResult:
        """
        Deliver one message and write exactly one SMS log row for the attempt.

        Order: configuration -> normalization -> opt-out -> carrier -> log.
        Always returns a DispatchResult; failures are reported through `status`/`reason`.
        """
        kind_value = kind.value if isinstance(kind, TemplateKind) else str(kind)
        try:
            message_id, recipient, meta = await self._attempt(to, body, site_id)
        except DispatchError as e:
            audit = await self.audit.record(
                site_id, e.recipient if e.recipient is not None else to, body, kind_value, e.status.value,
                related_id=related_id, meta=e.meta,
            )
            return DispatchResult(status=e.status, success=False, reason=e.reason, audit_written=audit.ok)

        meta = {**meta, "carrier_message_id": message_id}
        audit = await self.audit.record(
            site_id, recipient, body, kind_value, DispatchStatus.SENT.value,
            related_id=related_id, meta=meta,
        )
        return DispatchResult(status=DispatchStatus.SENT, success=True, message_id=message_id, audit_written=audit.ok)

    async def _attempt(self, to: str, body: str, site_id: str) -> tuple[str, str, dict]:
        if self.carrier is None or not self.sender_number:
            log.warning("Carrier not configured, SMS not sent: to=%s body=%r", to, (body or "")[:50])
            raise ConfigurationMissing("carrier_not_configured", recipient=to)

        normalized = normalize_phone(to, self.country_code)
        if not normalized:
            raise InvalidRecipient("invalid_phone", recipient=to)

        decision = await self.consent.check(site_id, to, normalized)
        if decision.suppressed:
            reason = "consent_lookup_failed" if decision.lookup_failed else "opted_out"
            raise ConsentSuppressed(reason, recipient=normalized)

        attempts = 0
        while True:
            attempts += 1
            meta = {"attempts": attempts} if attempts > 1 else {}
            try:
                message_id = await asyncio.wait_for(
                    self.carrier.send_message(from_number=self.sender_number, to=normalized, body=body),
                    timeout=self.retry.timeout_seconds,
                )
                return message_id, normalized, meta
            except asyncio.TimeoutError:
                log.error("Carrier send timed out after %.1fs to=%s", self.retry.timeout_seconds, normalized)
                raise CarrierFailure("carrier_timeout", recipient=normalized, meta=meta)
            except CarrierError as e:
                if e.transient and attempts < self.retry.max_attempts:
                    delay = self.retry.backoff(attempts)
                    log.warning("Transient carrier error (attempt %d), retrying in %.2fs: %s", attempts, delay, e)
                    await asyncio.sleep(delay)
                    continue
                log.error("Carrier send error: %s", e)
                raise CarrierFailure(str(e), recipient=normalized, meta=meta)
            except Exception as e:
                log.error("Carrier send error: %s", e)
                raise CarrierFailure(str(e), recipient=normalized, meta=meta)
