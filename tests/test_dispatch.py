import asyncio

import pytest

from conftest import FakeCarrier, SENDER, broken_session_factory
from notifier.modules.consent.models import SmsOptOut
from notifier.modules.dispatch.errors import DispatchStatus
from notifier.modules.dispatch.service import RetryPolicy
from notifier.modules.messaging.templates import TemplateKind
from notifier.platform.ports.carrier import CarrierError

SITE = "site-a"


class SlowCarrier(FakeCarrier):
    async def send_message(self, *, from_number: str, to: str, body: str) -> str:
        self.calls.append({"from_number": from_number, "to": to, "body": body})
        await asyncio.sleep(1)
        return self.sid


async def test_sent_normalizes_and_logs_message_id(dispatcher, carrier, sms_logs):
    result = await dispatcher.send("(205) 555-1212", "Your booking is confirmed", SITE,
                                   TemplateKind.BOOKING_CONFIRMATION, "bk-1")

    assert result.status == DispatchStatus.SENT
    assert result.success
    assert result.message_id == "SM0001"
    assert result.audit_written
    assert carrier.calls == [{"from_number": SENDER, "to": "+12055551212", "body": "Your booking is confirmed"}]

    [row] = await sms_logs(SITE)
    assert row.status == "sent"
    assert row.to_phone == "+12055551212"
    assert row.type == "booking_confirmation"
    assert row.related_id == "bk-1"
    assert row.meta == {"carrier_message_id": "SM0001"}


@pytest.mark.parametrize("to", ["2055551212", "555-1212", ""])
@pytest.mark.parametrize("missing", ["carrier", "sender"])
async def test_not_configured_never_calls_carrier(make_dispatcher, carrier, sms_logs, to, missing):
    if missing == "carrier":
        dispatcher = make_dispatcher(carrier=None)
    else:
        dispatcher = make_dispatcher(sender=None)

    result = await dispatcher.send(to, "hello", SITE)

    assert result.status == DispatchStatus.NOT_CONFIGURED
    assert not result.success
    assert result.reason == "carrier_not_configured"
    assert carrier.calls == []
    [row] = await sms_logs(SITE)
    assert row.status == "not_configured"
    assert row.to_phone == to


@pytest.mark.parametrize("to", ["555-1212", "", "22055551212"])
async def test_invalid_phone(dispatcher, carrier, sms_logs, to):
    result = await dispatcher.send(to, "hello", SITE)

    assert result.status == DispatchStatus.INVALID_PHONE
    assert result.reason == "invalid_phone"
    assert carrier.calls == []
    [row] = await sms_logs(SITE)
    assert row.status == "invalid_phone"
    assert row.to_phone == to


async def test_opted_out_recipient_is_suppressed(dispatcher, carrier, seed, sms_logs):
    await seed(SmsOptOut(phone="+12055551212", site_id=None))

    result = await dispatcher.send("2055551212", "promo", SITE, TemplateKind.CAMPAIGN)

    assert result.status == DispatchStatus.OPTED_OUT
    assert result.reason == "opted_out"
    assert carrier.calls == []
    [row] = await sms_logs(SITE)
    assert row.status == "opted_out"
    assert row.to_phone == "+12055551212"


async def test_consent_outage_fails_closed(make_dispatcher, carrier, sms_logs):
    dispatcher = make_dispatcher(consent_factory=broken_session_factory)

    result = await dispatcher.send("2055551212", "promo", SITE)

    assert result.status == DispatchStatus.OPTED_OUT
    assert result.reason == "consent_lookup_failed"
    assert carrier.calls == []
    assert [r.status for r in await sms_logs(SITE)] == ["opted_out"]


async def test_consent_outage_fails_open_when_configured(make_dispatcher, carrier):
    dispatcher = make_dispatcher(consent_factory=broken_session_factory, on_lookup_failure="open")

    result = await dispatcher.send("2055551212", "promo", SITE)

    assert result.status == DispatchStatus.SENT
    assert len(carrier.calls) == 1


async def test_carrier_error_is_failed_with_reason(make_dispatcher, sms_logs):
    carrier = FakeCarrier(errors=[CarrierError("The 'To' number is not a valid phone number.", code=21211)])
    dispatcher = make_dispatcher(carrier=carrier)

    result = await dispatcher.send("2055551212", "hello", SITE)

    assert result.status == DispatchStatus.FAILED
    assert result.reason == "The 'To' number is not a valid phone number."
    assert result.message_id is None
    [row] = await sms_logs(SITE)
    assert row.status == "failed"
    assert "carrier_message_id" not in row.meta


async def test_unexpected_carrier_exception_is_failed(make_dispatcher):
    dispatcher = make_dispatcher(carrier=FakeCarrier(errors=[RuntimeError("socket closed")]))

    result = await dispatcher.send("2055551212", "hello", SITE)

    assert result.status == DispatchStatus.FAILED
    assert result.reason == "socket closed"


async def test_permanent_error_is_not_retried(make_dispatcher):
    carrier = FakeCarrier(errors=[CarrierError("blocked", transient=False)])
    dispatcher = make_dispatcher(carrier=carrier, retry=RetryPolicy(max_attempts=3, backoff_base_seconds=0))

    result = await dispatcher.send("2055551212", "hello", SITE)

    assert result.status == DispatchStatus.FAILED
    assert len(carrier.calls) == 1


async def test_transient_error_retried_with_one_log_row(make_dispatcher, sms_logs):
    carrier = FakeCarrier(sid="SM0002", errors=[CarrierError("busy", transient=True)])
    dispatcher = make_dispatcher(carrier=carrier, retry=RetryPolicy(max_attempts=3, backoff_base_seconds=0))

    result = await dispatcher.send("2055551212", "hello", SITE)

    assert result.status == DispatchStatus.SENT
    assert result.message_id == "SM0002"
    assert len(carrier.calls) == 2
    [row] = await sms_logs(SITE)
    assert row.meta == {"attempts": 2, "carrier_message_id": "SM0002"}


async def test_retries_stop_at_max_attempts(make_dispatcher, sms_logs):
    carrier = FakeCarrier(errors=[CarrierError("busy", transient=True)] * 5)
    dispatcher = make_dispatcher(carrier=carrier, retry=RetryPolicy(max_attempts=2, backoff_base_seconds=0))

    result = await dispatcher.send("2055551212", "hello", SITE)

    assert result.status == DispatchStatus.FAILED
    assert result.reason == "busy"
    assert len(carrier.calls) == 2
    [row] = await sms_logs(SITE)
    assert row.meta == {"attempts": 2}


async def test_timeout_is_failed_and_not_retried(make_dispatcher, sms_logs):
    carrier = SlowCarrier()
    dispatcher = make_dispatcher(carrier=carrier, retry=RetryPolicy(max_attempts=3, timeout_seconds=0.05))

    result = await dispatcher.send("2055551212", "hello", SITE)

    assert result.status == DispatchStatus.FAILED
    assert result.reason == "carrier_timeout"
    assert len(carrier.calls) == 1
    assert [r.status for r in await sms_logs(SITE)] == ["failed"]


async def test_audit_failure_does_not_mask_delivery(make_dispatcher, carrier):
    dispatcher = make_dispatcher(audit_factory=broken_session_factory)

    result = await dispatcher.send("2055551212", "hello", SITE)

    assert result.status == DispatchStatus.SENT
    assert result.success
    assert result.message_id == "SM0001"
    assert not result.audit_written
    assert len(carrier.calls) == 1


def test_backoff_is_capped_exponential():
    policy = RetryPolicy(backoff_base_seconds=0.5, backoff_cap_seconds=3)
    assert [policy.backoff(n) for n in (1, 2, 3, 4)] == [0.5, 1.0, 2.0, 3]
