"""Request schema tests: whitespace stripping and length limits."""

import pytest
from pydantic import ValidationError

from samaj_diary.schemas.admin import BulletinCreate, MemberUpdate
from samaj_diary.schemas.registration import (
    MemberChoice,
    MobileSubmission,
    OtpSubmission,
    ProfileSubmission,
    WizardCreate,
)


def test_text_fields_are_stripped():
    profile = ProfileSubmission(name="  रमेश ", father_name=" सीता राम", village_id=" v1 ")
    assert (profile.name, profile.father_name, profile.village_id) == (
        "रमेश", "सीता राम", "v1",
    )


def test_otp_longer_than_six_rejected():
    assert OtpSubmission(code=" 123456 ").code == "123456"
    with pytest.raises(ValidationError):
        OtpSubmission(code="1234567")


def test_mobile_length_limit():
    with pytest.raises(ValidationError):
        MobileSubmission(mobile="9" * 21)


def test_wizard_flow_is_constrained():
    assert WizardCreate().flow == "register"
    with pytest.raises(ValidationError):
        WizardCreate(flow="delete")


def test_member_update_leaves_unset_fields_out():
    update = MemberUpdate(mobile=" 9876543210 ")
    assert update.model_dump(exclude_none=True) == {"mobile": "9876543210"}


def test_bulletin_defaults_to_active():
    assert BulletinCreate(content="सूचना").active is True


def test_member_choice_must_be_a_single_key():
    assert MemberChoice(member_id=" -N0001 ").member_id == "-N0001"
    for bad in ("m1/../../villages/v1", "..", "m1.json", "m 1"):
        with pytest.raises(ValidationError):
            MemberChoice(member_id=bad)
