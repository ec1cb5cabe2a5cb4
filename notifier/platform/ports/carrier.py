from typing import Protocol, runtime_checkable

class CarrierError(Exception):
    """Provider rejected or could not take the message. `transient` marks errors safe to retry."""

    def __init__(self, message: str, *, transient: bool = False, code: int | str | None = None):
        super().__init__(message)
        self.transient = transient
        self.code = code

@runtime_checkable
class CarrierPort(Protocol):
    async def send_message(self, *, from_number: str, to: str, body: str) -> str:
        """Send one text message; returns the provider message id."""
        ...
