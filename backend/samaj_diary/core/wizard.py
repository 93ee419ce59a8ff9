"""Registration Wizard: pure state machine for the verified-mobile flows.

Register: collect-mobile -> otp-sent -> collect-profile -> done
Update:   select-member -> collect-mobile -> otp-sent -> done

Invariants:
    - Every transition checks the current step and raises WizardStepError otherwise
    - Re-submitting a mobile from otp-sent issues a fresh challenge (resend)
    - The verified mobile is the challenge's mobile, never a later input
    - Transitions are pure apart from mutating the passed WizardState
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from samaj_diary.core.domain_types import WizardFlow, WizardStep
from samaj_diary.core.errors import ErrorContext, WizardStepError
from samaj_diary.core.otp import OtpChallenge, check_code, seconds_remaining


@dataclass
class WizardState:
    flow: WizardFlow
    step: WizardStep
    created_at: datetime
    id: UUID = field(default_factory=uuid4)
    mobile: str | None = None
    verified: bool = False
    member_id: str | None = None
    member_name: str | None = None
    challenge: OtpChallenge | None = None

    def summary(self, now: datetime) -> dict:
        """Client-facing view. Never includes the code."""
        return {
            "wizard_id": str(self.id),
            "flow": self.flow.value,
            "step": self.step.value,
            "mobile": self.mobile,
            "member_id": self.member_id,
            "member_name": self.member_name,
            "otp_seconds_remaining": (
                seconds_remaining(self.challenge, now)
                if self.challenge and self.step == WizardStep.OTP_SENT else None
            ),
        }


def new_wizard(flow: WizardFlow, now: datetime) -> WizardState:
    first = (
        WizardStep.SELECT_MEMBER if flow == WizardFlow.UPDATE
        else WizardStep.COLLECT_MOBILE
    )
    return WizardState(flow=flow, step=first, created_at=now)


def _require_step(state: WizardState, action: str, *allowed: WizardStep) -> None:
    if state.step not in allowed:
        raise WizardStepError(
            action, state.step.value, ErrorContext(wizard_id=str(state.id)),
        )


def choose_member(state: WizardState, member_id: str, member_name: str) -> None:
    """Update flow: pick whose mobile is being changed."""
    if state.flow != WizardFlow.UPDATE:
        raise WizardStepError(
            "choose_member", state.step.value,
            ErrorContext(wizard_id=str(state.id)),
        )
    _require_step(
        state, "choose_member",
        WizardStep.SELECT_MEMBER, WizardStep.COLLECT_MOBILE,
    )
    state.member_id = member_id
    state.member_name = member_name
    state.step = WizardStep.COLLECT_MOBILE


def ensure_can_submit_mobile(state: WizardState) -> None:
    _require_step(
        state, "submit_mobile", WizardStep.COLLECT_MOBILE, WizardStep.OTP_SENT,
    )


def record_challenge(state: WizardState, challenge: OtpChallenge) -> None:
    """Store a dispatched challenge; any earlier code stops being valid."""
    ensure_can_submit_mobile(state)
    state.mobile = challenge.mobile
    state.challenge = challenge
    state.step = WizardStep.OTP_SENT


def accept_code(
    state: WizardState, submitted: str, now: datetime, max_attempts: int,
) -> None:
    """Verify the code. Register moves on to the profile form.

    Update stays at otp-sent with verified=True until the service has
    patched the record and calls finish().
    """
    _require_step(state, "verify_otp", WizardStep.OTP_SENT)
    if state.challenge is None:
        raise WizardStepError(
            "verify_otp", state.step.value, ErrorContext(wizard_id=str(state.id)),
        )
    check_code(state.challenge, submitted, now, max_attempts)
    state.verified = True
    if state.flow == WizardFlow.REGISTER:
        state.step = WizardStep.COLLECT_PROFILE


def ensure_can_submit_profile(state: WizardState) -> None:
    _require_step(state, "submit_profile", WizardStep.COLLECT_PROFILE)


def finish(state: WizardState) -> None:
    if not state.verified:
        raise WizardStepError(
            "finish", state.step.value, ErrorContext(wizard_id=str(state.id)),
        )
    state.challenge = None
    state.step = WizardStep.DONE


def is_stale(state: WizardState, now: datetime, ttl_seconds: int) -> bool:
    return now - state.created_at > timedelta(seconds=ttl_seconds)
