"""Phone number validation for Sri Lankan mobile numbers."""

from __future__ import annotations

import re

_INTERNATIONAL = re.compile(r"^94(\d{9})$")
_LOCAL = re.compile(r"^0\d{9}$")


class InvalidPhoneNumberError(ValueError):
    """The number is neither ``94XXXXXXXXX`` nor ``0XXXXXXXXX``."""


def normalize_phone(raw: str) -> str:
    """Return the local ``0XXXXXXXXX`` form of ``raw``.

    >>> normalize_phone("94771234567")
    '0771234567'
    """
    candidate = (raw or "").strip()
    match = _INTERNATIONAL.match(candidate)
    if match:
        return "0" + match.group(1)
    if _LOCAL.match(candidate):
        return candidate
    raise InvalidPhoneNumberError(f"Invalid phone number: {raw!r}")


__all__ = ["InvalidPhoneNumberError", "normalize_phone"]
