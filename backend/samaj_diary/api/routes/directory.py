"""Directory Routes: the public read side (home bundle, search, bulletin, daily cards, share links).

Invariants:
    - Member records are returned in their stored camelCase shape plus id
    - /home degrades store failures to empty lists so the shell always renders
    - Member search with no village and no query returns an empty list
    - Share endpoints only build URLs; nothing is sent from the server
"""

import logging

from fastapi import APIRouter, Depends, Query

from samaj_diary.api.dependencies import get_daily_content_service, get_repository
from samaj_diary.config import get_settings
from samaj_diary.core.directory import (
    active_bulletin,
    filter_members,
    find_member,
    find_village,
    sort_villages,
    village_member_counts,
)
from samaj_diary.core.errors import DocumentStoreError, ResourceNotFoundError
from samaj_diary.core.share_links import (
    app_share_text,
    member_share_text,
    qr_code_url,
    village_deep_link,
    whatsapp_compose_url,
)
from samaj_diary.models import Bulletin, Member
from samaj_diary.services.daily_content import DailyContentService
from samaj_diary.services.repository import DirectoryRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["directory"])


def member_record(member: Member) -> dict:
    return {"id": member.id, **member.to_document()}


def bulletin_record(bulletin: Bulletin | None) -> dict | None:
    if bulletin is None:
        return None
    return {"id": bulletin.id, **bulletin.to_document()}


async def _or_empty(load, collection: str) -> list:
    try:
        return await load()
    except DocumentStoreError as e:
        logger.warning(
            f"Home bundle degraded: {e.message}", extra={"collection": collection},
        )
        return []


@router.get("/home")
async def home(
    v: str | None = Query(None, max_length=200),
    repository: DirectoryRepository = Depends(get_repository),
):
    """Initial bundle: villages, active bulletin, deep-linked village and its members."""
    villages = await _or_empty(repository.list_villages, "villages")
    bulletins = await _or_empty(repository.list_bulletins, "bulletin")

    selected = find_village(villages, v) if v else None
    members = []
    if selected is not None:
        all_members = await _or_empty(repository.list_members, "members")
        members = filter_members(all_members, villages, selected.id)

    return {
        "villages": [village.model_dump() for village in sort_villages(villages)],
        "bulletin": bulletin_record(active_bulletin(bulletins)),
        "selected_village": selected.model_dump() if selected else None,
        "members": [member_record(m) for m in members],
    }


@router.get("/villages")
async def list_villages(
    with_counts: bool = False,
    repository: DirectoryRepository = Depends(get_repository),
):
    villages = await repository.list_villages()
    if not with_counts:
        return [v.model_dump() for v in villages]
    counts = village_member_counts(await repository.list_members(), villages)
    return [{**v.model_dump(), "member_count": counts[v.id]} for v in villages]


@router.get("/members")
async def search_members(
    village_id: str | None = Query(None, max_length=200),
    q: str | None = Query(None, max_length=200),
    repository: DirectoryRepository = Depends(get_repository),
):
    """Village filter then free-text search (name, mobile, village, father)."""
    if not (village_id and village_id != "all") and not (q or "").strip():
        return []
    villages = await repository.list_villages()
    members = await repository.list_members()
    return [member_record(m) for m in filter_members(members, villages, village_id, q)]


@router.get("/bulletin/active")
async def get_active_bulletin(
    repository: DirectoryRepository = Depends(get_repository),
):
    return {"bulletin": bulletin_record(active_bulletin(await repository.list_bulletins()))}


@router.get("/content/daily")
async def get_daily_content(
    service: DailyContentService = Depends(get_daily_content_service),
):
    return await service.get_daily_content()


# ─── Share links ─────────────────────────────────────────────────

@router.get("/share/app")
async def share_app():
    settings = get_settings()
    return {
        "url": whatsapp_compose_url(
            app_share_text(settings.app_name, settings.public_url),
        ),
    }


@router.get("/share/members/{member_id}")
async def share_member(
    member_id: str, repository: DirectoryRepository = Depends(get_repository),
):
    member = find_member(await repository.list_members(), member_id)
    if member is None:
        raise ResourceNotFoundError("Member", member_id)
    return {
        "url": whatsapp_compose_url(
            member_share_text(get_settings().app_name, member),
        ),
    }


@router.get("/share/villages/{village_id}")
async def share_village(
    village_id: str, repository: DirectoryRepository = Depends(get_repository),
):
    """Deep link and QR image URL for one village."""
    village = find_village(await repository.list_villages(), village_id)
    if village is None:
        raise ResourceNotFoundError("Village", village_id)
    link = village_deep_link(get_settings().public_url, village.id)
    return {"village": village.model_dump(), "link": link, "qr_code_url": qr_code_url(link)}
