import re

_NON_DIGIT = re.compile(r"\D")

def normalize_phone(phone: str | None, country_code: str = "1") -> str | None:
    """
    Convert a free-form phone string into E.164, or return None if it can't be dialed.

    "2055551212"      -> "+12055551212"
    "1 (205) 555-1212" -> "+12055551212"
    "+44 20 7946 0958" -> returned unchanged (already international)
    "555-1212"        -> None
    """
    if not phone:
        return None
    digits = _NON_DIGIT.sub("", phone)
    if len(digits) == 10:
        return f"+{country_code}{digits}"
    if len(digits) == 10 + len(country_code) and digits.startswith(country_code):
        return f"+{digits}"
    if len(digits) > 10 and phone.startswith("+"):
        return phone
    return None
