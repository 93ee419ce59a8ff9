"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - VillageId, MemberId, BulletinId wrap document-store keys (opaque strings)
    - A document-store key is one path segment: letters, digits, "_" or "-"
    - Mobile is always the normalized 10-digit form once it leaves validation
    - All valid states encoded as Enums: no raw string matching
"""

import re
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

VillageId = NewType("VillageId", str)
MemberId = NewType("MemberId", str)
BulletinId = NewType("BulletinId", str)

RECORD_KEY_PATTERN = r"^[A-Za-z0-9_-]+$"
_RECORD_KEY = re.compile(RECORD_KEY_PATTERN)


def is_record_key(value: str) -> bool:
    return bool(_RECORD_KEY.fullmatch(value))


# ─── Value Types ─────────────────────────────────────────────────

Mobile = NewType("Mobile", str)        # exactly 10 digits
IsoDate = NewType("IsoDate", str)      # YYYY-MM-DD in the content timezone


# ─── Enums ───────────────────────────────────────────────────────

class Collection(str, Enum):
    """Document-store collection paths."""
    VILLAGES = "villages"
    MEMBERS = "members"
    BULLETIN = "bulletin"


DAILY_CONTENT_PATH = "config/dailyContent"


class WizardFlow(str, Enum):
    """Which verified-mobile flow a wizard runs."""
    REGISTER = "register"
    UPDATE = "update"


class WizardStep(str, Enum):
    """Linear wizard steps. SELECT_MEMBER only exists in the update flow."""
    SELECT_MEMBER = "select-member"
    COLLECT_MOBILE = "collect-mobile"
    OTP_SENT = "otp-sent"
    COLLECT_PROFILE = "collect-profile"
    DONE = "done"


class ContentKind(str, Enum):
    """Date-keyed generated content kinds."""
    QUOTE = "quote"
    PANCHANG = "panchang"
