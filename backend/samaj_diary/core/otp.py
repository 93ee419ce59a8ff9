"""One-Time Codes: generation, expiry and verification for mobile checks.

Invariants:
    - Codes are 6-digit strings drawn uniformly from 100000..999999
    - A challenge verifies only its own code; issuing a new one replaces it
    - Expiry is enforced here: a correct code after expires_at is rejected
    - Comparison is constant-time
    - After max_attempts wrong codes the challenge is unusable

A code verifies when it equals the issued one, with two departures from
plain equality: surrounding whitespace in the submission is ignored, and a
challenge that hit the attempt cap or expired refuses even the correct code.
"""

import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from samaj_diary.core.errors import (
    OtpAttemptsExceededError, OtpExpiredError, OtpMismatchError,
)

OTP_LOW = 100_000
OTP_SPAN = 900_000


def generate_otp() -> str:
    return str(OTP_LOW + secrets.randbelow(OTP_SPAN))


@dataclass
class OtpChallenge:
    mobile: str
    code: str
    issued_at: datetime
    expires_at: datetime
    attempts: int = 0


def issue_challenge(
    mobile: str, now: datetime, expiry_seconds: int, code: str | None = None,
) -> OtpChallenge:
    return OtpChallenge(
        mobile=mobile,
        code=code or generate_otp(),
        issued_at=now,
        expires_at=now + timedelta(seconds=expiry_seconds),
    )


def seconds_remaining(challenge: OtpChallenge, now: datetime) -> int:
    return max(0, int((challenge.expires_at - now).total_seconds()))


def check_code(
    challenge: OtpChallenge, submitted: str, now: datetime, max_attempts: int,
) -> None:
    """Raise unless `submitted` is the live code. Mutates the attempt counter."""
    if challenge.attempts >= max_attempts:
        raise OtpAttemptsExceededError(max_attempts)
    if now >= challenge.expires_at:
        raise OtpExpiredError()
    if hmac.compare_digest(
        challenge.code.encode(), (submitted or "").strip().encode(),
    ):
        return
    challenge.attempts += 1
    if challenge.attempts >= max_attempts:
        raise OtpAttemptsExceededError(max_attempts)
    raise OtpMismatchError(max_attempts - challenge.attempts)
