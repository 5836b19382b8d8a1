"""Phone number canonicalisation used to key contacts."""
from __future__ import annotations

import re
from typing import Any

COUNTRY_PREFIX_WITH_TRUNK = "880"
COUNTRY_PREFIX = "88"
LOCAL_LENGTH_WITHOUT_TRUNK = 10
MIN_KEY_LENGTH = 10

_NON_DIGITS = re.compile(r"\D")


def _localize(digits: str) -> str:
    if digits.startswith(COUNTRY_PREFIX_WITH_TRUNK):
        digits = digits[len(COUNTRY_PREFIX_WITH_TRUNK):]
    elif digits.startswith(COUNTRY_PREFIX):
        digits = digits[len(COUNTRY_PREFIX):]

    if len(digits) == LOCAL_LENGTH_WITHOUT_TRUNK:
        digits = "0" + digits
    return digits


def normalize_phone(raw: Any) -> str:
    """Return the local form of ``raw`` (``01XXXXXXXXX`` for a valid mobile).

    Best effort only: malformed input comes back as a short string that
    :func:`is_valid_key` rejects. Never raises.

    The prefix rules are applied until the value stops changing, so a result
    that still begins with ``88`` is reduced the same way a second call would
    reduce it. For real numbers one pass is always enough.
    """

    if raw is None:
        return ""
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    digits = _NON_DIGITS.sub("", str(raw))

    while digits:
        localized = _localize(digits)
        if localized == digits:
            break
        digits = localized
    return digits


def is_valid_key(phone: str, min_length: int = MIN_KEY_LENGTH) -> bool:
    return len(phone) >= min_length


__all__ = ["normalize_phone", "is_valid_key", "MIN_KEY_LENGTH"]
