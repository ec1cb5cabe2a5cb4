import re
from enum import Enum
from typing import Any, Mapping

class TemplateKind(str, Enum):
    BOOKING_CONFIRMATION = "booking_confirmation"
    BOOKING_OWNER_NOTIFY = "booking_owner_notify"
    CAMPAIGN = "campaign"
    CANCELLATION = "cancellation"
    REMINDER = "reminder"
    OUTGOING = "outgoing"

class Token(str, Enum):
    """Placeholders template authors may use as {{name}}."""
    CUSTOMER_NAME = "customer_name"
    CUSTOMER_PHONE = "customer_phone"
    CUSTOMER_EMAIL = "customer_email"
    BUSINESS_NAME = "business_name"
    DATE = "date"
    TIME_SLOT = "time_slot"
    BOAT_COUNT = "boat_count"
    BOAT_TYPE = "boat_type"
    ADDONS = "addons"
    GUEST_COUNT = "guest_count"
    TOTAL = "total"
    LOCATION = "location"
    PAYMENT_STATUS = "payment_status"

TOKEN_NAMES = frozenset(t.value for t in Token)

class TokenContext(dict[str, str]):
    """Token values for one dispatch. Keys are restricted to the Token vocabulary."""

    def __init__(self, values: Mapping[str | Token, Any] | None = None, **kwargs: Any):
        super().__init__()
        for key, value in {**(values or {}), **kwargs}.items():
            self[key] = value

    def __setitem__(self, key: str | Token, value: Any) -> None:
        name = key.value if isinstance(key, Token) else key
        if name not in TOKEN_NAMES:
            raise ValueError(f"unknown_token: {name}")
        super().__setitem__(name, "" if value is None else str(value))

DEFAULT_TEMPLATES: dict[TemplateKind, str] = {
    TemplateKind.BOOKING_CONFIRMATION: (
        "[{{business_name}}] Hi {{customer_name}}! Your booking is confirmed.\n\n"
        "Date: {{date}}\nTime: {{time_slot}}\nTotal: ${{total}}\n\n"
        "Questions? Reply to this number!"
    ),
    TemplateKind.BOOKING_OWNER_NOTIFY: (
        "NEW BOOKING!\n\n"
        "Customer: {{customer_name}}\nPhone: {{customer_phone}}\n"
        "Date: {{date}}\nTime: {{time_slot}}\nTotal: ${{total}}\nPayment: {{payment_status}}"
    ),
    TemplateKind.CANCELLATION: (
        "[{{business_name}}] Hi {{customer_name}}, your booking for {{date}} "
        "({{time_slot}}) has been cancelled. Questions? Reply to this number!"
    ),
}

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

def render_template(template: str | None, context: Mapping[str, Any]) -> str:
    """
    Substitute {{token}} placeholders from context in a single pass.

    Keys missing from context are left as-is, so "Hi {{unknown}}" stays "Hi {{unknown}}".
    Substituted values are not scanned again.
    """
    if not template:
        return ""

    def _sub(match: re.Match) -> str:
        key = match.group(1)
        if key in context:
            return str(context[key])
        return match.group(0)

    return _PLACEHOLDER.sub(_sub, template)
