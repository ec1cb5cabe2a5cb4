from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from notifier.core.config import Settings
from notifier.modules.audit.service import AuditLogger
from notifier.modules.bookings.context import ContextBuilder
from notifier.modules.consent.service import ConsentGate
from notifier.modules.dispatch.service import SmsDispatcher, RetryPolicy
from notifier.platform.ports.carrier import CarrierPort
from notifier.platform.adapters.carrier_noop import NoopCarrier
from notifier.platform.adapters.carrier_twilio import TwilioCarrier

class ProviderRegistry:
    """
    Builds the carrier and the services around it from one Settings object.

    Constructed explicitly (at app startup, or in tests) and passed where needed;
    there is no module-level client.
    """

    def __init__(self, settings: Settings, session_factory: async_sessionmaker[AsyncSession],
                 carrier: CarrierPort | None = None):
        self.settings = settings
        self.session_factory = session_factory
        self._carrier = carrier
        self._carrier_built = carrier is not None

    def carrier(self) -> CarrierPort | None:
        """None when the provider has no credentials; dispatches are then logged as not_configured."""
        if not self._carrier_built:
            prov = (self.settings.CARRIER_PROVIDER or "twilio").lower()
            if prov == "noop":
                self._carrier = NoopCarrier()
            elif self.settings.TWILIO_ACCOUNT_SID and self.settings.TWILIO_AUTH_TOKEN:
                self._carrier = TwilioCarrier(self.settings.TWILIO_ACCOUNT_SID, self.settings.TWILIO_AUTH_TOKEN)
            else:
                self._carrier = None
            self._carrier_built = True
        return self._carrier

    def consent_gate(self) -> ConsentGate:
        return ConsentGate(
            self.session_factory,
            scope=self.settings.OPT_OUT_SCOPE,
            on_lookup_failure=self.settings.OPT_OUT_LOOKUP_FAILURE,
        )

    def audit_logger(self) -> AuditLogger:
        return AuditLogger(self.session_factory)

    def context_builder(self) -> ContextBuilder:
        return ContextBuilder(self.session_factory)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.settings.CARRIER_MAX_ATTEMPTS,
            timeout_seconds=self.settings.CARRIER_TIMEOUT_SECONDS,
            backoff_base_seconds=self.settings.CARRIER_BACKOFF_BASE_SECONDS,
            backoff_cap_seconds=self.settings.CARRIER_BACKOFF_CAP_SECONDS,
        )

    def dispatcher(self) -> SmsDispatcher:
        return SmsDispatcher(
            self.carrier(),
            self.settings.TWILIO_PHONE_NUMBER,
            self.consent_gate(),
            self.audit_logger(),
            retry=self.retry_policy(),
            country_code=self.settings.DEFAULT_COUNTRY_CODE,
        )

def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry
