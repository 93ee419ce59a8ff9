"""Registration Routes: register / update-mobile wizards and deletion requests.

Invariants:
    - Wizard state is per-wizard, in-memory (module-level dict)
    - Stale wizards are pruned whenever a new one is created
    - Responses carry the wizard summary; the OTP code is never included
    - A finished wizard is removed after its final response is built
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from samaj_diary.api.dependencies import get_registration_service
from samaj_diary.api.routes.directory import member_record
from samaj_diary.config import get_settings
from samaj_diary.core.domain_types import WizardFlow, WizardStep
from samaj_diary.core.errors import ErrorContext, ResourceNotFoundError
from samaj_diary.core.language_strings import Message, get_message
from samaj_diary.core.wizard import WizardState, is_stale, new_wizard
from samaj_diary.schemas.registration import (
    DeletionRequest,
    MemberChoice,
    MobileSubmission,
    OtpSubmission,
    ProfileSubmission,
    WizardCreate,
    WizardResponse,
)
from samaj_diary.services.registration import RegistrationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/registration", tags=["registration"])

# Single-process uvicorn: wizard state is lost on restart
_wizards: dict[UUID, WizardState] = {}


def get_wizard_or_404(wizard_id: UUID) -> WizardState:
    state = _wizards.get(wizard_id)
    if state is None:
        raise ResourceNotFoundError(
            "Wizard", str(wizard_id),
            ErrorContext(
                wizard_id=str(wizard_id),
                user_message=get_message(Message.WIZARD_RESTART),
            ),
        )
    return state


def _prune_stale(service: RegistrationService) -> None:
    now = service.now()
    ttl = get_settings().wizard_ttl_seconds
    for wizard_id in [k for k, s in _wizards.items() if is_stale(s, now, ttl)]:
        del _wizards[wizard_id]


def _respond(
    state: WizardState, service: RegistrationService, message: str | None = None,
) -> WizardResponse:
    return WizardResponse(**state.summary(service.now()), message=message)


@router.post(
    "/wizards", response_model=WizardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_wizard(
    body: WizardCreate,
    service: RegistrationService = Depends(get_registration_service),
):
    """Start a register or update-mobile wizard."""
    _prune_stale(service)
    state = new_wizard(WizardFlow(body.flow), service.now())
    _wizards[state.id] = state
    logger.info(
        f"Wizard started ({state.flow.value})", extra={"wizard_id": str(state.id)},
    )
    return _respond(state, service)


@router.get("/wizards/{wizard_id}", response_model=WizardResponse)
async def get_wizard(
    wizard_id: UUID,
    service: RegistrationService = Depends(get_registration_service),
):
    return _respond(get_wizard_or_404(wizard_id), service)


@router.get("/wizards/{wizard_id}/candidates")
async def list_candidates(
    wizard_id: UUID,
    village_id: str = Query(..., min_length=1, max_length=200),
    service: RegistrationService = Depends(get_registration_service),
):
    """Members of a village for the update picker (mobiles masked)."""
    get_wizard_or_404(wizard_id)
    return await service.village_candidates(village_id)


@router.post("/wizards/{wizard_id}/member", response_model=WizardResponse)
async def choose_member(
    wizard_id: UUID,
    body: MemberChoice,
    service: RegistrationService = Depends(get_registration_service),
):
    state = get_wizard_or_404(wizard_id)
    await service.select_member(state, body.member_id)
    return _respond(state, service)


@router.post("/wizards/{wizard_id}/mobile", response_model=WizardResponse)
async def submit_mobile(
    wizard_id: UUID,
    body: MobileSubmission,
    service: RegistrationService = Depends(get_registration_service),
):
    """Validate the mobile and dispatch an OTP. Calling again resends."""
    state = get_wizard_or_404(wizard_id)
    await service.submit_mobile(state, body.mobile)
    return _respond(state, service)


@router.post("/wizards/{wizard_id}/otp")
async def submit_otp(
    wizard_id: UUID,
    body: OtpSubmission,
    service: RegistrationService = Depends(get_registration_service),
):
    """Verify the code. The update flow completes here."""
    state = get_wizard_or_404(wizard_id)
    member = await service.verify_otp(state, body.code)
    if member is None:
        return _respond(state, service)

    response = _respond(state, service, get_message(Message.MOBILE_UPDATED))
    _wizards.pop(state.id, None)
    return {**response.model_dump(), "member": member_record(member)}


@router.post("/wizards/{wizard_id}/profile", status_code=status.HTTP_201_CREATED)
async def submit_profile(
    wizard_id: UUID,
    body: ProfileSubmission,
    service: RegistrationService = Depends(get_registration_service),
):
    """Create the member record with the verified mobile."""
    state = get_wizard_or_404(wizard_id)
    member = await service.submit_profile(
        state, body.name, body.father_name, body.village_id,
    )
    response = _respond(state, service, get_message(Message.REGISTERED))
    if state.step == WizardStep.DONE:
        _wizards.pop(state.id, None)
    return {**response.model_dump(), "member": member_record(member)}


@router.delete("/wizards/{wizard_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_wizard(wizard_id: UUID):
    get_wizard_or_404(wizard_id)
    del _wizards[wizard_id]
    logger.info("Wizard cancelled", extra={"wizard_id": str(wizard_id)})


@router.post("/deletion-request")
async def deletion_request(
    body: DeletionRequest,
    service: RegistrationService = Depends(get_registration_service),
):
    """Pre-filled message link asking the admin to remove a record."""
    url = await service.deletion_request_link(
        body.name, body.father_name, body.mobile, body.village_id,
    )
    return {"url": url}
