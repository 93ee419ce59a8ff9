"""Registration Service: IO around the verified-mobile wizard.

Invariants:
    - Mobile collisions are checked against members fetched fresh from the store,
      before any OTP is dispatched, and again right before the final write
    - Gateway failure leaves the wizard where it was; no retry, no fake success
    - The update flow writes only `mobile` and `updatedAt` on the chosen member
    - Registration writes a complete member with denormalized villageName
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from samaj_diary.config import Settings
from samaj_diary.core.directory import (
    find_member, find_village, members_of_village, mobile_conflict,
)
from samaj_diary.core.domain_types import WizardFlow
from samaj_diary.core.errors import (
    ErrorContext,
    MessagingGatewayError,
    MissingFieldsError,
    MobileAlreadyRegisteredError,
    ResourceNotFoundError,
)
from samaj_diary.core.otp import issue_challenge
from samaj_diary.core.repository_protocols import OtpSender
from samaj_diary.core.share_links import deletion_request_text, whatsapp_compose_url
from samaj_diary.core.validation import mask_mobile, require_devanagari, require_mobile
from samaj_diary.core.wizard import (
    WizardState,
    accept_code,
    choose_member,
    ensure_can_submit_mobile,
    ensure_can_submit_profile,
    finish,
    record_challenge,
)
from samaj_diary.models import Member
from samaj_diary.models.member import now_ms
from samaj_diary.services.repository import DirectoryRepository

logger = logging.getLogger(__name__)


class RegistrationService:
    """Drives register / update wizards against the store and the OTP gateway."""

    def __init__(
        self,
        repository: DirectoryRepository,
        otp_sender: OtpSender,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repository = repository
        self.otp_sender = otp_sender
        self.settings = settings
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._clock()

    async def village_candidates(self, village_id: str) -> list[dict]:
        """Members of a village for the update picker, mobiles masked."""
        members = await self.repository.list_members()
        return [
            {
                "id": m.id,
                "name": m.name,
                "father_name": m.father_name,
                "masked_mobile": mask_mobile(m.mobile),
            }
            for m in members_of_village(members, village_id)
        ]

    async def select_member(self, state: WizardState, member_id: str) -> Member:
        member = await self.repository.get_member(member_id)
        choose_member(state, member.id, member.name)
        return member

    async def submit_mobile(self, state: WizardState, raw_mobile: str) -> None:
        """Validate, check uniqueness, dispatch a fresh OTP."""
        ensure_can_submit_mobile(state)
        ctx = ErrorContext(wizard_id=str(state.id))
        mobile = require_mobile(raw_mobile)
        for_update = state.flow == WizardFlow.UPDATE

        members = await self.repository.list_members()
        if mobile_conflict(members, mobile, state.member_id if for_update else None):
            raise MobileAlreadyRegisteredError(mobile, for_update=for_update, context=ctx)

        challenge = issue_challenge(
            mobile, self.now(), self.settings.otp_expiry_seconds,
        )
        sent = await self.otp_sender.send_otp(mobile, challenge.code)
        if not sent:
            raise MessagingGatewayError("gateway rejected dispatch", context=ctx)

        state_was_resend = state.challenge is not None
        record_challenge(state, challenge)
        logger.info(
            f"OTP {'re' if state_was_resend else ''}sent for {state.flow.value} wizard",
            extra={"wizard_id": str(state.id)},
        )

    async def verify_otp(self, state: WizardState, code: str) -> Member | None:
        """Check the code. Update flow patches the mobile and returns the member."""
        accept_code(state, code, self.now(), self.settings.otp_max_attempts)
        if state.flow == WizardFlow.REGISTER:
            return None

        ctx = ErrorContext(wizard_id=str(state.id))
        members = await self.repository.list_members()
        member = find_member(members, state.member_id or "")
        if member is None:
            raise ResourceNotFoundError("Member", state.member_id or "", ctx)
        if mobile_conflict(members, state.mobile, member.id):
            raise MobileAlreadyRegisteredError(state.mobile, for_update=True, context=ctx)

        updated_at = now_ms()
        await self.repository.update_member(
            member.id, {"mobile": state.mobile, "updatedAt": updated_at},
        )
        finish(state)
        logger.info(
            f"Member {member.id} mobile updated", extra={"wizard_id": str(state.id)},
        )
        return member.model_copy(
            update={"mobile": state.mobile, "updated_at": updated_at},
        )

    async def submit_profile(
        self, state: WizardState, name: str, father_name: str, village_id: str,
    ) -> Member:
        """Final registration step: create the member record."""
        ensure_can_submit_profile(state)
        ctx = ErrorContext(wizard_id=str(state.id))
        missing = [
            label for label, value in (
                ("name", name), ("father_name", father_name), ("village_id", village_id),
            )
            if not (value or "").strip()
        ]
        if missing:
            raise MissingFieldsError(missing, ctx)
        name = require_devanagari("name", name)
        father_name = require_devanagari("father_name", father_name)

        village = find_village(await self.repository.list_villages(), village_id)
        if village is None:
            raise ResourceNotFoundError("Village", village_id, ctx)
        if mobile_conflict(await self.repository.list_members(), state.mobile):
            raise MobileAlreadyRegisteredError(state.mobile, context=ctx)

        member = await self.repository.add_member({
            "name": name,
            "fatherName": father_name,
            "mobile": state.mobile,
            "villageId": village.id,
            "villageName": village.name,
            "updatedAt": now_ms(),
        })
        finish(state)
        logger.info(
            f"Member {member.id} registered", extra={"wizard_id": str(state.id)},
        )
        return member

    async def deletion_request_link(
        self, name: str, father_name: str, mobile: str, village_id: str,
    ) -> str:
        """Messaging-app link asking the admin to remove a record."""
        missing = [
            label for label, value in (
                ("name", name), ("father_name", father_name),
                ("mobile", mobile), ("village_id", village_id),
            )
            if not (value or "").strip()
        ]
        if missing:
            raise MissingFieldsError(missing)
        mobile = require_mobile(mobile)
        village = find_village(await self.repository.list_villages(), village_id)
        if village is None:
            raise ResourceNotFoundError("Village", village_id)
        text = deletion_request_text(
            name.strip(), father_name.strip(), village.name, mobile,
        )
        return whatsapp_compose_url(text, self.settings.support_whatsapp_number)
