"""Input Validation: mobile normalization and Devanagari name checks.

Invariants:
    - normalize_mobile strips every non-digit; it never pads or truncates
    - A valid mobile is exactly 10 digits after normalization
    - Empty text passes is_devanagari_name (required-ness is checked separately)
"""

import re

from samaj_diary.core.domain_types import Mobile
from samaj_diary.core.errors import InvalidMobileError, InvalidNameError

MOBILE_LENGTH = 10

_NON_DIGIT = re.compile(r"\D")
# Devanagari block plus whitespace and the punctuation names commonly carry
_DEVANAGARI_NAME = re.compile(r"^[\u0900-\u097F\s./()\-]+$")


def normalize_mobile(raw: str) -> str:
    return _NON_DIGIT.sub("", raw or "")


def is_valid_mobile(mobile: str) -> bool:
    return len(mobile) == MOBILE_LENGTH and mobile.isdigit()


def require_mobile(raw: str) -> Mobile:
    """Normalize and validate, raising InvalidMobileError on failure."""
    mobile = normalize_mobile(raw)
    if not is_valid_mobile(mobile):
        raise InvalidMobileError(mobile)
    return Mobile(mobile)


def is_devanagari_name(text: str) -> bool:
    if not text:
        return True
    return bool(_DEVANAGARI_NAME.match(text))


def require_devanagari(field_name: str, text: str) -> str:
    """Return the stripped name or raise InvalidNameError."""
    if not is_devanagari_name(text):
        raise InvalidNameError(field_name)
    return text.strip()


def mask_mobile(mobile: str) -> str:
    """Replace every digit except the last four with '*'."""
    if len(mobile) <= 4:
        return mobile
    return "*" * (len(mobile) - 4) + mobile[-4:]
