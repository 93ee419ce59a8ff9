"""Admin Routes: console login and CRUD over villages, members and bulletins.

Invariants:
    - Every route except /login requires a valid bearer token (require_admin)
    - Import takes raw CSV text as the request body (name,father,mobile,village)
    - Export streams an HTML-table spreadsheet as an attachment
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from samaj_diary.api.dependencies import (
    bearer_token,
    get_admin_service,
    get_admin_sessions,
    get_daily_content_service,
    get_repository,
    require_admin,
)
from samaj_diary.api.routes.directory import bulletin_record, member_record
from samaj_diary.core.directory import village_member_counts
from samaj_diary.core.member_export import EXPORT_FILENAME, EXPORT_MEDIA_TYPE
from samaj_diary.schemas.admin import (
    AdminLogin,
    AdminToken,
    BulletinCreate,
    BulletinUpdate,
    MemberCreate,
    MemberUpdate,
    NameCleanupRequest,
    VillageCreate,
)
from samaj_diary.services.admin import AdminService
from samaj_diary.services.admin_auth import AdminSessions
from samaj_diary.services.daily_content import DailyContentService
from samaj_diary.services.repository import DirectoryRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin", tags=["admin"])
guarded = [Depends(require_admin)]


@router.post("/login", response_model=AdminToken)
async def login(
    body: AdminLogin, sessions: AdminSessions = Depends(get_admin_sessions),
):
    session = sessions.login(body.email, body.password)
    return AdminToken(token=session.token, expires_at=session.expires_at.isoformat())


@router.post(
    "/logout", status_code=status.HTTP_204_NO_CONTENT, dependencies=guarded,
)
async def logout(
    token: str | None = Depends(bearer_token),
    sessions: AdminSessions = Depends(get_admin_sessions),
):
    sessions.logout(token)


# ─── Villages ────────────────────────────────────────────────────

@router.get("/villages", dependencies=guarded)
async def list_villages(repository: DirectoryRepository = Depends(get_repository)):
    """Villages with member counts."""
    villages = await repository.list_villages()
    counts = village_member_counts(await repository.list_members(), villages)
    return [{**v.model_dump(), "member_count": counts[v.id]} for v in villages]


@router.post(
    "/villages", status_code=status.HTTP_201_CREATED, dependencies=guarded,
)
async def add_village(
    body: VillageCreate, service: AdminService = Depends(get_admin_service),
):
    return (await service.add_village(body.name)).model_dump()


@router.delete(
    "/villages/{village_id}",
    status_code=status.HTTP_204_NO_CONTENT, dependencies=guarded,
)
async def delete_village(
    village_id: str, service: AdminService = Depends(get_admin_service),
):
    """Members keep their villageId; they stop appearing under any village."""
    await service.delete_village(village_id)


# ─── Members ─────────────────────────────────────────────────────

@router.get("/members", dependencies=guarded)
async def list_members(service: AdminService = Depends(get_admin_service)):
    return [member_record(m) for m in await service.list_members()]


@router.post(
    "/members", status_code=status.HTTP_201_CREATED, dependencies=guarded,
)
async def add_member(
    body: MemberCreate, service: AdminService = Depends(get_admin_service),
):
    member = await service.add_member(
        body.name, body.father_name, body.mobile, body.village_id,
    )
    return member_record(member)


@router.patch("/members/{member_id}", dependencies=guarded)
async def update_member(
    member_id: str,
    body: MemberUpdate,
    service: AdminService = Depends(get_admin_service),
):
    member = await service.update_member(member_id, body.model_dump(exclude_none=True))
    return member_record(member)


@router.delete(
    "/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT, dependencies=guarded,
)
async def delete_member(
    member_id: str, service: AdminService = Depends(get_admin_service),
):
    await service.delete_member(member_id)


@router.post("/members/import", dependencies=guarded)
async def import_members(
    request: Request, service: AdminService = Depends(get_admin_service),
):
    """Body is CSV text; returns imported count and per-line skip reasons."""
    body = await request.body()
    return await service.import_members(body.decode("utf-8", errors="replace"))


@router.get("/members/export", dependencies=guarded)
async def export_members(service: AdminService = Depends(get_admin_service)):
    sheet = await service.export_members()
    return Response(
        content=sheet,
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


# ─── Bulletins ───────────────────────────────────────────────────

@router.get("/bulletins", dependencies=guarded)
async def list_bulletins(repository: DirectoryRepository = Depends(get_repository)):
    return [bulletin_record(b) for b in await repository.list_bulletins()]


@router.post(
    "/bulletins", status_code=status.HTTP_201_CREATED, dependencies=guarded,
)
async def publish_bulletin(
    body: BulletinCreate, service: AdminService = Depends(get_admin_service),
):
    return bulletin_record(await service.publish_bulletin(body.content, body.active))


@router.patch("/bulletins/{bulletin_id}", dependencies=guarded)
async def set_bulletin_active(
    bulletin_id: str,
    body: BulletinUpdate,
    service: AdminService = Depends(get_admin_service),
):
    return bulletin_record(await service.set_bulletin_active(bulletin_id, body.active))


@router.delete(
    "/bulletins/{bulletin_id}",
    status_code=status.HTTP_204_NO_CONTENT, dependencies=guarded,
)
async def delete_bulletin(
    bulletin_id: str, service: AdminService = Depends(get_admin_service),
):
    await service.delete_bulletin(bulletin_id)


@router.delete("/bulletins", dependencies=guarded)
async def clear_bulletins(service: AdminService = Depends(get_admin_service)):
    return {"deleted": await service.clear_bulletins()}


# ─── Daily content and tools ─────────────────────────────────────

@router.post("/content/sync", dependencies=guarded)
async def sync_daily_content(
    service: DailyContentService = Depends(get_daily_content_service),
):
    """Force regeneration of today's quote and almanac."""
    return await service.sync()


@router.post("/tools/clean-names", dependencies=guarded)
async def clean_names(
    body: NameCleanupRequest,
    service: DailyContentService = Depends(get_daily_content_service),
):
    return {"text": await service.clean_names(body.text)}
