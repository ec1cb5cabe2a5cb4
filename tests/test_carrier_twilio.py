from types import SimpleNamespace

import pytest
from twilio.base.exceptions import TwilioException, TwilioRestException

from notifier.platform.adapters.carrier_twilio import TwilioCarrier
from notifier.platform.ports.carrier import CarrierError


class FakeMessages:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.created: list[dict] = []

    def create(self, **kwargs):
        self.created.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(sid="SM123")


def carrier_with(messages: FakeMessages) -> TwilioCarrier:
    return TwilioCarrier("AC123", "secret", client=SimpleNamespace(messages=messages))


async def test_send_returns_message_sid():
    messages = FakeMessages()

    sid = await carrier_with(messages).send_message(from_number="+15550001111", to="+12055551212", body="hi")

    assert sid == "SM123"
    assert messages.created == [{"body": "hi", "from_": "+15550001111", "to": "+12055551212"}]


@pytest.mark.parametrize("status,transient", [(503, True), (429, True), (400, False)])
async def test_rest_errors_map_to_carrier_error(status, transient):
    error = TwilioRestException(status, "/Messages.json", msg="busy", code=20003)

    with pytest.raises(CarrierError) as exc:
        await carrier_with(FakeMessages(error)).send_message(from_number="+1555", to="+1205", body="hi")

    assert str(exc.value) == "busy"
    assert exc.value.transient is transient
    assert exc.value.code == 20003


async def test_sdk_error_is_permanent():
    with pytest.raises(CarrierError) as exc:
        await carrier_with(FakeMessages(TwilioException("bad credentials"))).send_message(
            from_number="+1555", to="+1205", body="hi")
    assert not exc.value.transient


async def test_connection_error_is_transient():
    with pytest.raises(CarrierError) as exc:
        await carrier_with(FakeMessages(ConnectionError("reset"))).send_message(
            from_number="+1555", to="+1205", body="hi")
    assert exc.value.transient
