from enum import Enum

class DispatchStatus(str, Enum):
    NOT_CONFIGURED = "not_configured"
    INVALID_PHONE = "invalid_phone"
    OPTED_OUT = "opted_out"
    SENT = "sent"
    FAILED = "failed"

class DispatchError(Exception):
    """Terminal outcome of one dispatch attempt. Converted to a DispatchResult, never propagated to callers."""
    status: DispatchStatus = DispatchStatus.FAILED

    def __init__(self, reason: str, *, recipient: str | None = None, meta: dict | None = None):
        super().__init__(reason)
        self.reason = reason
        self.recipient = recipient  # phone to write to the log
        self.meta = meta or {}

class ConfigurationMissing(DispatchError):
    status = DispatchStatus.NOT_CONFIGURED

class InvalidRecipient(DispatchError):
    status = DispatchStatus.INVALID_PHONE

class ConsentSuppressed(DispatchError):
    status = DispatchStatus.OPTED_OUT

class CarrierFailure(DispatchError):
    status = DispatchStatus.FAILED

class AuditWriteFailure(Exception):
    """The SMS log row could not be written. Reported only; the dispatch outcome stands."""
