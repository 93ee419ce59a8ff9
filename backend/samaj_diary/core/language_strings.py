"""Language Strings: centralized Hindi text shown to members and the admin.

Invariants:
    - All strings are pure data (no IO, no computation beyond lookup)
    - Every Message member has an entry in _MESSAGES
    - Errors reference Message keys; the client renders user_message verbatim
"""

import random
from enum import Enum


class Message(str, Enum):
    """Keys for user-facing messages."""
    INVALID_MOBILE = "invalid_mobile"
    MOBILE_ALREADY_REGISTERED = "mobile_already_registered"
    MOBILE_TAKEN_BY_OTHER = "mobile_taken_by_other"
    OTP_SEND_FAILED = "otp_send_failed"
    WRONG_OTP = "wrong_otp"
    OTP_EXPIRED = "otp_expired"
    OTP_ATTEMPTS_EXCEEDED = "otp_attempts_exceeded"
    ALL_FIELDS_REQUIRED = "all_fields_required"
    DEVANAGARI_ONLY = "devanagari_only"
    WIZARD_RESTART = "wizard_restart"
    WRONG_CREDENTIALS = "wrong_credentials"
    NOT_FOUND = "not_found"
    NO_DATA = "no_data"
    SAVE_FAILED = "save_failed"
    CONTENT_UNAVAILABLE = "content_unavailable"
    SERVER_ERROR = "server_error"
    INVALID_REQUEST = "invalid_request"
    REGISTERED = "registered"
    MOBILE_UPDATED = "mobile_updated"


_MESSAGES: dict[Message, str] = {
    Message.INVALID_MOBILE: "कृपया सही 10 अंकों का मोबाइल नंबर डालें",
    Message.MOBILE_ALREADY_REGISTERED: "यह नंबर पहले से पंजीकृत है।",
    Message.MOBILE_TAKEN_BY_OTHER: "यह नया नंबर पहले से किसी और के पास पंजीकृत है।",
    Message.OTP_SEND_FAILED: "OTP भेजने में समस्या हुई।",
    Message.WRONG_OTP: "गलत OTP।",
    Message.OTP_EXPIRED: "OTP की समय सीमा समाप्त हो गई है। कृपया नया OTP प्राप्त करें।",
    Message.OTP_ATTEMPTS_EXCEEDED: "बहुत अधिक गलत प्रयास। कृपया नया OTP प्राप्त करें।",
    Message.ALL_FIELDS_REQUIRED: "सभी जानकारी आवश्यक है।",
    Message.DEVANAGARI_ONLY: "कृपया नाम केवल हिंदी (देवनागरी) में ही लिखें।",
    Message.WIZARD_RESTART: "प्रक्रिया फिर से शुरू करें।",
    Message.WRONG_CREDENTIALS: "गलत क्रेडेंशियल्स",
    Message.NOT_FOUND: "जानकारी नहीं मिली।",
    Message.NO_DATA: "डेटा उपलब्ध नहीं है",
    Message.SAVE_FAILED: "डाटा सुरक्षित करने में त्रुटि हुई।",
    Message.CONTENT_UNAVAILABLE: "आज का पंचांग उपलब्ध नहीं है।",
    Message.SERVER_ERROR: "सर्वर एरर।",
    Message.INVALID_REQUEST: "कृपया दी गई जानकारी जाँचें।",
    Message.REGISTERED: "सफलतापूर्वक पंजीकृत।",
    Message.MOBILE_UPDATED: "मोबाइल नंबर सफलतापूर्वक अपडेट हो गया है।",
}


def get_message(key: Message) -> str:
    """Look up the Hindi text for a message key."""
    return _MESSAGES[key]


# --- Daily content fallbacks -------------------------------------------------

FALLBACK_QUOTES: tuple[str, ...] = (
    "शिक्षित बनो, संगठित रहो, संघर्ष करो।",
    "जब तक आप सामाजिक स्वतंत्रता हासिल नहीं कर लेते, कानून द्वारा दी गई "
    "कोई भी स्वतंत्रता आपके किसी काम की नहीं है।",
    "धर्म मनुष्य के लिए है, मनुष्य धर्म के लिए नहीं।",
    "बुद्धि का विकास मानव अस्तित्व का अंतिम लक्ष्य होना चाहिए।",
)

PANCHANG_UNAVAILABLE = _MESSAGES[Message.CONTENT_UNAVAILABLE]


def pick_fallback_quote(rng: random.Random | None = None) -> str:
    """Random quote from the static pool."""
    return (rng or random).choice(FALLBACK_QUOTES)  # nosec B311
