"""Registration Schemas: wizard requests and responses.

Invariants:
    - Mobile inputs accept any formatting; digits are extracted by the service
    - OTP inputs are at most 6 characters after stripping
    - A chosen member_id must be a single store key
    - No response schema ever carries the OTP code
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from samaj_diary.core.domain_types import RECORD_KEY_PATTERN


class _Stripped(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class WizardCreate(BaseModel):
    flow: Literal["register", "update"] = "register"


class MemberChoice(_Stripped):
    member_id: str = Field(min_length=1, max_length=200, pattern=RECORD_KEY_PATTERN)


class MobileSubmission(_Stripped):
    mobile: str = Field(min_length=1, max_length=20)


class OtpSubmission(_Stripped):
    code: str = Field(min_length=1, max_length=6)


class ProfileSubmission(_Stripped):
    name: str = Field("", max_length=200)
    father_name: str = Field("", max_length=200)
    village_id: str = Field("", max_length=200)


class DeletionRequest(_Stripped):
    name: str = Field("", max_length=200)
    father_name: str = Field("", max_length=200)
    mobile: str = Field("", max_length=20)
    village_id: str = Field("", max_length=200)


class WizardResponse(BaseModel):
    wizard_id: str
    flow: str
    step: str
    mobile: str | None = None
    member_id: str | None = None
    member_name: str | None = None
    otp_seconds_remaining: int | None = None
    message: str | None = None
