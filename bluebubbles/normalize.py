"""
Address normalization for contact matching.

Phone numbers arrive in many shapes ("+1 (918) 625-7838", "+19186257838",
"918-625-7838"). Everything is reduced to a lookup key so that the same
subscriber number matches regardless of formatting or country code.
"""

import re

PHONE_KEY_DIGITS = 10

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_phone(phone: str) -> str:
    """
    Normalize a phone number for matching.

    Strips everything except digits, then keeps the last 10 digits
    (drops the country code). Shorter numbers are returned as-is.

        "+1 (918) 625-7838" -> "9186257838"
        "+19186257838"      -> "9186257838"
        "918-625-7838"      -> "9186257838"
    """
    digits = _NON_DIGITS.sub("", str(phone))
    if len(digits) >= PHONE_KEY_DIGITS:
        return digits[-PHONE_KEY_DIGITS:]
    return digits


def normalize_address(address) -> str:
    """
    Normalize an address (phone or email) for map lookup.

    Emails are trimmed and lowercased; anything else is treated as a
    phone number.
    """
    if not address:
        return ""
    trimmed = str(address).strip().lower()
    if "@" in trimmed:
        return trimmed
    return normalize_phone(trimmed)
