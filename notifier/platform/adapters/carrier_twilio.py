import asyncio
import logging
from twilio.rest import Client as TwilioClient
from twilio.base.exceptions import TwilioException, TwilioRestException
from notifier.platform.ports.carrier import CarrierPort, CarrierError

log = logging.getLogger("carrier.twilio")

_TRANSIENT_HTTP = {429, 500, 502, 503, 504}

class TwilioCarrier(CarrierPort):
    def __init__(self, account_sid: str, auth_token: str, client: TwilioClient | None = None):
        self.client = client or TwilioClient(account_sid, auth_token)
        log.info("Twilio client initialized")

    def _create(self, from_number: str, to: str, body: str) -> str:
        message = self.client.messages.create(body=body, from_=from_number, to=to)
        return message.sid

    async def send_message(self, *, from_number: str, to: str, body: str) -> str:
        # the SDK is blocking; keep it off the event loop
        try:
            return await asyncio.to_thread(self._create, from_number, to, body)
        except TwilioRestException as e:
            raise CarrierError(e.msg or str(e), transient=e.status in _TRANSIENT_HTTP, code=e.code) from e
        except TwilioException as e:
            raise CarrierError(str(e)) from e
        except OSError as e:
            # requests' connection errors are OSErrors
            raise CarrierError(f"Twilio unreachable: {e}", transient=True) from e
